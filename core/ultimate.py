import logging
from config import ENTRY_COUNT, STRICT_ULTIMATE
from core.errors import MissingGeotagError
from core.parse import GeoRecord
from core.reader import load_geotag_pp, load_tag_pp
from core.writer import write_geotags, write_tag_ultimate
from pathlib import Path

logger = logging.getLogger(__name__)


def rank_tag(ids: list[int], geotags: dict[int, GeoRecord], limit: int = ENTRY_COUNT) -> list[int]:
    """Most recent first, original order kept on equal times, truncated to limit"""
    return sorted(ids, key=lambda i: geotags[i].time, reverse=True)[:limit]


class UltimateRanker:
    """Keep the most recent photos of every tag and the geotag rows they need"""

    def __init__(self, entry_count: int = ENTRY_COUNT, strict: bool = STRICT_ULTIMATE):
        self.entry_count = entry_count
        self.strict = strict
        self.missing_ids: set[int] = set()

    def _known_ids(self, tag: str, ids: list[int], geotags: dict[int, GeoRecord]) -> list[int]:
        """Drop ids without a geotag row, or raise in strict mode"""
        known = []
        for photo_id in ids:
            if photo_id in geotags:
                known.append(photo_id)
                continue
            if self.strict:
                raise MissingGeotagError(photo_id, tag)
            if photo_id not in self.missing_ids:
                logger.warning(f"No geotag for photo {photo_id} (tag '{tag}') - skipping")
                self.missing_ids.add(photo_id)
        return known

    def rank(self, tags: dict[str, list[int]], geotags: dict[int, GeoRecord]) -> dict[str, list[int]]:
        """Rank every tag's ids by capture time and keep at most entry_count of them"""
        ranked = {}
        for tag, ids in tags.items():
            ranked[tag] = rank_tag(self._known_ids(tag, ids, geotags), geotags, self.entry_count)
        return ranked

    @staticmethod
    def occurring_ids(ranked: dict[str, list[int]]) -> list[int]:
        """Sorted union of the ranked ids; an id kept under several tags appears once"""
        return sorted({photo_id for ids in ranked.values() for photo_id in ids})

    def run(self, tag_pp_file: Path, geotag_pp_file: Path, tag_output: Path, geotag_output: Path) -> bool:
        """Main processing function for the ultimate stage"""
        try:
            geotags = load_geotag_pp(geotag_pp_file)
            logger.info(f"Geotag read: {len(geotags)} entries")

            tags = load_tag_pp(tag_pp_file)
            logger.info(f"Tag read: {len(tags)} entries")

            ranked = self.rank(tags, geotags)
            if self.missing_ids:
                logger.warning(f"{len(self.missing_ids)} ids referenced by tags have no geotag row")

            write_tag_ultimate(tag_output, ranked)
            logger.info(f"Tag wrote: {tag_output}")

            occur_ids = self.occurring_ids(ranked)
            write_geotags(geotag_output, geotags, occur_ids)
            logger.info(f"Geotag wrote: {len(occur_ids)} entries to {geotag_output}")
            return True

        except MissingGeotagError as e:
            logger.error(f"Strict mode: {e}")
            return False
        except (OSError, ValueError) as e:
            logger.error(f"Error in ultimate stage: {e}")
            return False
