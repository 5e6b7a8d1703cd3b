import logging
from config import NO_TAG, PROGRESS_INTERVAL
from core.errors import MalformedLineError
from core.parse import GeoRecord, parse_geotag_pp_line, parse_tag_pp_line, parse_tag_ultimate_line
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


def iter_lines(input_file: Path) -> Iterator[str]:
    """Yield lines without their line terminator, logging progress on large files"""
    with open(input_file) as f:
        for i, line in enumerate(f, 1):
            if i % PROGRESS_INTERVAL == 0:
                logger.debug(f"{input_file.name}: {i} lines read")
            yield line.rstrip('\r\n')


def read_untagged_row(tag_pp_file: Path) -> list[int]:
    """Return the ids on the mandatory first NO_TAG row of a preprocessed tag file"""
    with open(tag_pp_file) as f:
        first = f.readline().rstrip('\r\n')

    tag, ids = parse_tag_pp_line(first)
    if tag != NO_TAG:
        raise MalformedLineError(first, f"first row of {tag_pp_file} is not {NO_TAG}")
    return ids


def load_tag_pp(tag_pp_file: Path, ultimate: bool = False) -> dict[str, list[int]]:
    """
    Load a preprocessed tag file into tag -> ids, skipping the NO_TAG row

    Args:
        tag_pp_file: tag_pp.csv, or tag_ultimate.csv when ultimate is True
        ultimate: rows have no count column and there is no NO_TAG row

    Malformed rows are logged and skipped.
    """
    parse_row = parse_tag_ultimate_line if ultimate else parse_tag_pp_line
    lines = iter_lines(tag_pp_file)
    if not ultimate:
        # tag_pp.csv has NO_TAG at the first line
        next(lines, None)

    tags = {}
    for line in lines:
        try:
            tag, ids = parse_row(line)
        except MalformedLineError as e:
            logger.warning(f"Ignored : {e.line}")
            continue
        tags[tag] = ids

    return tags


def load_geotag_pp(geotag_pp_file: Path) -> dict[int, GeoRecord]:
    """Load a preprocessed geotag file into id -> GeoRecord; later rows overwrite earlier ones"""
    geotags = {}
    for line in iter_lines(geotag_pp_file):
        try:
            photo_id, record = parse_geotag_pp_line(line)
        except MalformedLineError as e:
            logger.warning(f"Ignored : {e.line}")
            continue
        geotags[photo_id] = record

    return geotags
