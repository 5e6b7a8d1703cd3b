import logging
import pandas as pd
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

GEOTAG_COLUMNS = ['id', 'time', 'latitude', 'longitude', 'domain_num', 'path_segment', 'url_token']


class GeotagStatistics:
    """Summary statistics over a preprocessed geotag file"""

    def load(self, geotag_file: Path) -> pd.DataFrame:
        return pd.read_csv(
            geotag_file,
            header=None,
            names=GEOTAG_COLUMNS,
            dtype={'id': 'int64', 'time': 'int64', 'domain_num': 'int64', 'path_segment': 'int64', 'url_token': str},
        )

    def summarize(self, geotag_file: Path) -> dict:
        if geotag_file.stat().st_size == 0:
            logger.warning(f"{geotag_file} is empty")
            return {'rows': 0, 'time_range': None, 'bounding_box': None, 'domains': {}}

        df = self.load(geotag_file)

        earliest, latest = int(df['time'].min()), int(df['time'].max())
        return {
            'rows': len(df),
            'time_range': {
                'earliest': datetime.fromtimestamp(earliest, tz=UTC).isoformat(),
                'latest': datetime.fromtimestamp(latest, tz=UTC).isoformat(),
            },
            'bounding_box': {
                'min_latitude': float(df['latitude'].min()),
                'max_latitude': float(df['latitude'].max()),
                'min_longitude': float(df['longitude'].min()),
                'max_longitude': float(df['longitude'].max()),
            },
            'domains': {int(k): int(v) for k, v in df['domain_num'].value_counts().sort_index().items()},
        }
