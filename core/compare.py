import logging
from core.reader import load_geotag_pp, load_tag_pp
from pathlib import Path

logger = logging.getLogger(__name__)


class CoverageComparer:
    """Compare the ids a tag file references with the ids a geotag file holds (hikaku)"""

    def __init__(self, ultimate: bool = False):
        self.ultimate = ultimate

    def tag_ids(self, tag_file: Path) -> set[int]:
        """Ids referenced by any tag; the NO_TAG row is left out"""
        tags = load_tag_pp(tag_file, ultimate=self.ultimate)
        return {photo_id for ids in tags.values() for photo_id in ids}

    def geotag_ids(self, geotag_file: Path) -> set[int]:
        return set(load_geotag_pp(geotag_file))

    def compare(self, tag_file: Path, geotag_file: Path) -> dict:
        """
        Set differences between the two files

        Returns:
            dict with the sizes of both id sets, 'missing_from_geotag' (tag ids
            without a geotag row) and 'unreferenced' (geotag ids no tag uses)
        """
        tag_ids = self.tag_ids(tag_file)
        geotag_ids = self.geotag_ids(geotag_file)

        result = {
            'tag_ids': len(tag_ids),
            'geotag_ids': len(geotag_ids),
            'missing_from_geotag': sorted(tag_ids - geotag_ids),
            'unreferenced': sorted(geotag_ids - tag_ids),
        }

        logger.info(f"Tag ids: {result['tag_ids']}, geotag ids: {result['geotag_ids']}")
        logger.info(f"Missing from geotag: {len(result['missing_from_geotag'])}")
        logger.info(f"Unreferenced geotags: {len(result['unreferenced'])}")
        return result
