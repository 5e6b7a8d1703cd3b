import logging
from core.errors import ExcludedIdError, MalformedLineError
from core.parse import GeoRecord, parse_geo_line
from core.reader import iter_lines, read_untagged_row
from core.writer import write_geotags
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def load_untagged_ids(tag_pp_file: Path) -> set[int]:
    """Read the NO_TAG row of a preprocessed tag file as an exclusion set"""
    return set(read_untagged_row(tag_pp_file))


class GeoTagCompactor:
    """Collect compacted geotag records keyed by photo id, skipping untagged photos"""

    def __init__(self, untagged_ids: set[int] | None = None):
        self.untagged_ids = untagged_ids if untagged_ids is not None else set()
        self.geotags: dict[int, GeoRecord] = {}
        self.excluded = 0
        self.ignored_lines = 0

    def add_line(self, line: str) -> bool:
        """Parse and store one geotag source line; returns whether it was kept"""
        try:
            photo_id, record = parse_geo_line(line, self.untagged_ids)
        except ExcludedIdError:
            self.excluded += 1
            return False
        except MalformedLineError as e:
            logger.warning(f"Ignored : {line}")
            logger.debug(e.reason)
            self.ignored_lines += 1
            return False

        # Duplicate rows: the later one wins
        self.geotags[photo_id] = record
        return True

    def compact(self, lines: Iterable[str]) -> dict[int, GeoRecord]:
        for line in lines:
            self.add_line(line)
        return self.geotags

    def log_counts(self):
        logger.info(f"Geotag entries: {len(self.geotags)}")
        logger.info(f"Excluded (NO_TAG): {self.excluded}")
        if self.ignored_lines:
            logger.info(f"Ignored lines: {self.ignored_lines}")

    def process_geotag_file(self, tag_pp_file: Path, geotag_file: Path, output_file: Path) -> bool:
        """Main processing function for the geotag-pp stage"""
        try:
            self.untagged_ids = load_untagged_ids(tag_pp_file)
            logger.info(f"Loaded {len(self.untagged_ids)} untagged ids from {tag_pp_file}")

            logger.info(f"Reading geotags from {geotag_file}")
            self.compact(iter_lines(geotag_file))
            self.log_counts()

            write_geotags(output_file, self.geotags)
            logger.info(f"Output written to {output_file}")
            return True

        except MalformedLineError as e:
            logger.error(f"Invalid preprocessed tag file: {e}")
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Error processing geotag file: {e}")
            return False
