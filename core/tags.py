import logging
from config import NO_TAG
from core.parse import parse_tag_line
from core.reader import iter_lines
from core.writer import dedupe, write_tag_pp
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


class TagAggregator:
    """Build the inverted tag index (tag -> photo ids) from tag source lines"""

    def __init__(self):
        self.tags: dict[str, list[int]] = {}
        self.untagged: list[int] = []
        self.ignored_lines = 0

    def add(self, tag: str, photo_id: int):
        """Append an id under its tag, or to the untagged list for the NO_TAG sentinel"""
        if tag == NO_TAG:
            self.untagged.append(photo_id)
        else:
            self.tags.setdefault(tag, []).append(photo_id)

    def add_line(self, line: str) -> bool:
        parsed = parse_tag_line(line)
        if parsed is None:
            logger.warning(f"Ignored : {line}")
            self.ignored_lines += 1
            return False

        self.add(*parsed)
        return True

    def aggregate(self, lines: Iterable[str]) -> dict[str, list[int]]:
        for line in lines:
            self.add_line(line)
        return self.tags

    def log_counts(self):
        logger.info(f"Entries: {len(self.tags)}")
        logger.info(f"NO_TAG: {len(dedupe(self.untagged))} ({len(self.untagged)} rows)")
        if self.ignored_lines:
            logger.info(f"Ignored lines: {self.ignored_lines}")

    def process_tag_file(self, input_file: Path, output_file: Path) -> bool:
        """Main processing function for the tag-pp stage"""
        try:
            logger.info(f"Reading tags from {input_file}")
            self.aggregate(iter_lines(input_file))
            self.log_counts()

            write_tag_pp(output_file, self.tags, self.untagged)
            logger.info(f"Output written to {output_file}")
            return True

        except (OSError, ValueError) as e:
            logger.error(f"Error processing tag file: {e}")
            return False
