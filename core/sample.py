import logging
from config import GEOTAG_SOURCE_FILE, TAG_SOURCE_FILE
from core.errors import MalformedLineError
from core.parse import parse_geo_line, parse_tag_line
from core.reader import iter_lines
from pathlib import Path

logger = logging.getLogger(__name__)


class TestSetExtractor:
    """Cut a small coherent sample out of the source files for testing"""

    __test__ = False  # not a pytest class

    def extract(self, tag_file: Path, geotag_file: Path, to_dir: Path, count: int) -> bool:
        """
        Copy the first `count` parseable geotag lines and the tag lines of the same photos

        Args:
            tag_file: Tag source file
            geotag_file: Geotag source file
            to_dir: Directory receiving tag.csv and geotag.csv
            count: Number of geotag rows to keep

        Returns:
            bool: True if the sample was written, False otherwise
        """
        try:
            geotag_lines = []
            ids = set()
            for line in iter_lines(geotag_file):
                if len(geotag_lines) >= count:
                    break
                try:
                    photo_id, _ = parse_geo_line(line)
                except MalformedLineError:
                    logger.warning(f"Ignored : {line}")
                    continue
                geotag_lines.append(line)
                ids.add(photo_id)

            tag_lines = []
            for line in iter_lines(tag_file):
                parsed = parse_tag_line(line)
                if parsed is None:
                    logger.warning(f"Ignored : {line}")
                elif parsed[1] in ids:
                    tag_lines.append(line)

            to_dir.mkdir(parents=True, exist_ok=True)
            with open(to_dir / GEOTAG_SOURCE_FILE, 'w') as f:
                f.writelines(line + '\n' for line in geotag_lines)
            with open(to_dir / TAG_SOURCE_FILE, 'w') as f:
                f.writelines(line + '\n' for line in tag_lines)

            logger.info(f"Sampled {len(geotag_lines)} geotag rows and {len(tag_lines)} tag rows into {to_dir}")
            return True

        except (OSError, ValueError) as e:
            logger.error(f"Error extracting test set: {e}")
            return False
