import logging
from config import NO_TAG
from core.parse import GeoRecord, format_coordinate, quote_tag
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def join_ids(ids: Iterable[int]) -> str:
    return ','.join(str(i) for i in ids)


def format_tag_pp_line(tag: str, ids: list[int]) -> str:
    """<tag>,<count>,<ids>"""
    return f"{quote_tag(tag)},{len(ids)},{join_ids(ids)}"


def format_ultimate_tag_line(tag: str, ids: list[int]) -> str:
    """<tag>,<ids> (no count column)"""
    return f"{quote_tag(tag)},{join_ids(ids)}"


def format_geotag_row(photo_id: int, record: GeoRecord) -> str:
    """<id>,<time>,<lat>,<lon>,<domain>,<path segment>,<hex token padded to 10 digits>"""
    return (
        f"{photo_id},{record.time},{format_coordinate(record.latitude)},{format_coordinate(record.longitude)},"
        f"{record.domain_num},{record.path_segment},{record.url_token:010x}"
    )


def dedupe(ids: Iterable[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order"""
    return list(dict.fromkeys(ids))


def write_tag_pp(output_file: Path, tags: dict[str, list[int]], untagged: list[int]) -> int:
    """Write the preprocessed tag file; the NO_TAG row always comes first"""
    with open(output_file, 'w') as f:
        f.write(format_tag_pp_line(NO_TAG, dedupe(untagged)) + '\n')
        for tag in sorted(tags):
            f.write(format_tag_pp_line(tag, tags[tag]) + '\n')

    logger.debug(f"Wrote {len(tags) + 1} tag rows to {output_file}")
    return len(tags) + 1


def write_tag_ultimate(output_file: Path, ranked: dict[str, list[int]]) -> int:
    with open(output_file, 'w') as f:
        for tag in sorted(ranked):
            f.write(format_ultimate_tag_line(tag, ranked[tag]) + '\n')

    logger.debug(f"Wrote {len(ranked)} tag rows to {output_file}")
    return len(ranked)


def write_geotags(output_file: Path, geotags: dict[int, GeoRecord], ids: Iterable[int] | None = None) -> int:
    """Write geotag rows for ids (every id in the table, ascending, when None)"""
    if ids is None:
        ids = sorted(geotags)

    count = 0
    with open(output_file, 'w') as f:
        for photo_id in ids:
            f.write(format_geotag_row(photo_id, geotags[photo_id]) + '\n')
            count += 1

    logger.debug(f"Wrote {count} geotag rows to {output_file}")
    return count
