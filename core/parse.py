"""
Line grammars for the tag and geotag datasets.

Source files:
    tag.csv       <id>,<tag name or empty>          (tag name may be wrapped in triple quotes)
    geotag.csv    <id>,"<YYYY-MM-DD HH:MM:SS>",<lat>,<lon>,<photo url>

Preprocessed files:
    tag_pp.csv    <tag>,<count>,<id>,<id>,...       (first line is always the NO_TAG row;
                                                     tags holding a comma are triple-quoted)
    geotag_pp.csv <id>,<time>,<lat>,<lon>,<domain>,<path segment>,<hex token>

The photo URL is stored as three numbers instead of a string. With the default
template, http://farm3.static.flickr.com/42/12345678_00000000ab.jpg becomes
domain 3, path segment 42 and token 0xab; the repeated photo id is dropped.
"""

import re
from config import NO_TAG, URL_COMMON, URL_PREFIX, URL_SUFFIX
from core.errors import ExcludedIdError, MalformedLineError
from datetime import UTC, datetime
from decimal import Decimal
from typing import NamedTuple

TAG_RE = re.compile(r'(\d+),(.*)', re.ASCII)
QUOTE_RE = re.compile(r'"""(.*)"""')
COORDINATE = r'([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?i:inf|infinity|nan))'
GEOTAG_RE = re.compile(
    r'(\d{8,10}),(.+),' + COORDINATE + ',' + COORDINATE + ','
    + re.escape(URL_PREFIX)
    + r'(\d)'
    + re.escape(URL_COMMON)
    + r'(\d{1,4})/(\d{8,10})_([0-9a-f]{10})'
    + re.escape(URL_SUFFIX),
    re.ASCII,
)
GEOTAG_PP_RE = re.compile(
    r'(\d+),(-?\d+),' + COORDINATE + ',' + COORDINATE + r',(\d),(\d{1,4}),([0-9a-f]{10})', re.ASCII
)
TIME_RE = re.compile(r'"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"', re.ASCII)
TIME_FORMAT = '%Y-%m-%d %H:%M:%S'

# Tag names holding a comma are written wrapped in triple quotes, like in the source file
QUOTED_TAG_PP_RE = re.compile(r'"""(.*)""",(\d+),(.*)', re.ASCII)
QUOTED_TAG_ULTIMATE_RE = re.compile(r'"""(.*)""",(.*)')
ID_LIST_RE = re.compile(r'(?:\d+(?:,\d+)*)?', re.ASCII)


class GeoRecord(NamedTuple):
    """Compacted geotag row; the photo id is the key it is stored under"""

    time: int
    latitude: float
    longitude: float
    domain_num: int
    path_segment: int
    url_token: int

    def url(self, photo_id: int) -> str:
        """Rebuild the original photo URL from the template"""
        return f"{URL_PREFIX}{self.domain_num}{URL_COMMON}{self.path_segment}/{photo_id}_{self.url_token:010x}{URL_SUFFIX}"


def to_int32(value: int) -> int:
    """Wrap an integer to signed 32-bit (two's complement truncation)"""
    return (value + 2**31) % 2**32 - 2**31


def parse_timestamp(quoted: str) -> int:
    """Convert '"YYYY-MM-DD HH:MM:SS"' (UTC) to Unix seconds wrapped to signed 32-bit"""
    match = TIME_RE.fullmatch(quoted)
    if not match:
        raise ValueError(f"bad timestamp {quoted}")
    dt = datetime.strptime(match.group(1), TIME_FORMAT).replace(tzinfo=UTC)
    return to_int32(int(dt.timestamp()))


def format_coordinate(value: float) -> str:
    """Shortest round-trip rendering without exponent or trailing '.0'"""
    text = repr(value)
    if 'e' in text:
        text = format(Decimal(text), 'f')
    if text.endswith('.0'):
        text = text[:-2]
    return text


def parse_tag_line(line: str) -> tuple[str, int] | None:
    """Parse '<id>,<tag>' into (tag, id); None when the line doesn't match"""
    match = TAG_RE.fullmatch(line)
    if not match:
        return None

    photo_id = int(match.group(1))
    key = match.group(2)
    if not key:
        return NO_TAG, photo_id

    quoted = QUOTE_RE.search(key)
    if quoted:
        key = quoted.group(1)
    return key, photo_id


def parse_geo_line(line: str, excluded_ids: set[int] | frozenset[int] = frozenset()) -> tuple[int, GeoRecord]:
    """
    Parse one geotag source line into (id, GeoRecord)

    Raises:
        MalformedLineError: the line doesn't match, or a matched field fails conversion
        ExcludedIdError: the id is in excluded_ids (checked before any other field)
    """
    match = GEOTAG_RE.fullmatch(line)
    if not match:
        raise MalformedLineError(line)

    photo_id = int(match.group(1))
    if photo_id in excluded_ids:
        raise ExcludedIdError(photo_id)

    if int(match.group(7)) != photo_id:
        raise MalformedLineError(line, f"url id {match.group(7)} differs from {photo_id}")

    try:
        record = GeoRecord(
            time=parse_timestamp(match.group(2)),
            latitude=float(match.group(3)),
            longitude=float(match.group(4)),
            domain_num=int(match.group(5)),
            path_segment=int(match.group(6)),
            url_token=int(match.group(8), 16),
        )
    except ValueError as e:
        raise MalformedLineError(line, str(e)) from e

    return photo_id, record


def parse_geotag_pp_line(line: str) -> tuple[int, GeoRecord]:
    """Parse a preprocessed geotag row back into (id, GeoRecord)"""
    match = GEOTAG_PP_RE.fullmatch(line)
    if not match:
        raise MalformedLineError(line)

    try:
        return int(match.group(1)), GeoRecord(
            time=int(match.group(2)),
            latitude=float(match.group(3)),
            longitude=float(match.group(4)),
            domain_num=int(match.group(5)),
            path_segment=int(match.group(6)),
            url_token=int(match.group(7), 16),
        )
    except ValueError as e:
        raise MalformedLineError(line, str(e)) from e


def quote_tag(tag: str) -> str:
    """Wrap a tag name in triple quotes when it would be ambiguous in a comma-separated row"""
    if ',' in tag or tag.startswith('"""'):
        return f'"""{tag}"""'
    return tag


def parse_id_list(line: str, text: str) -> list[int]:
    if not ID_LIST_RE.fullmatch(text):
        raise MalformedLineError(line, "bad id list")
    return [int(s) for s in text.split(',')] if text else []


def parse_tag_pp_line(line: str) -> tuple[str, list[int]]:
    """
    Parse '<tag>,<count>,<ids>' into (tag, ids)

    A tag name holding a comma is wrapped in triple quotes; otherwise the tag
    ends at the first comma. The count column must match the number of ids.
    """
    quoted = QUOTED_TAG_PP_RE.fullmatch(line)
    if quoted:
        tag, count, id_text = quoted.groups()
    else:
        parts = line.split(',', 2)
        if len(parts) < 2 or not parts[1].isascii() or not parts[1].isdigit():
            raise MalformedLineError(line, "no count column")
        tag, count = parts[0], parts[1]
        id_text = parts[2] if len(parts) == 3 else ''

    ids = parse_id_list(line, id_text)
    if int(count) != len(ids):
        raise MalformedLineError(line, f"count {count} doesn't match {len(ids)} ids")
    return tag, ids


def parse_tag_ultimate_line(line: str) -> tuple[str, list[int]]:
    """Parse '<tag>,<ids>' (no count column) into (tag, ids)"""
    quoted = QUOTED_TAG_ULTIMATE_RE.fullmatch(line)
    if quoted:
        tag, id_text = quoted.groups()
    else:
        tag, sep, id_text = line.partition(',')
        if not sep:
            raise MalformedLineError(line)

    return tag, parse_id_list(line, id_text)
