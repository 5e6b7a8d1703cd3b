class LineParseError(ValueError):
    """Base class for lines that cannot be turned into a record"""


class MalformedLineError(LineParseError):
    """Line does not match the expected shape, or a matched field fails numeric conversion"""

    def __init__(self, line: str, reason: str = "the line didn't match the regex"):
        super().__init__(f"{reason}: {line}")
        self.line = line
        self.reason = reason


class ExcludedIdError(LineParseError):
    """Photo id is in the untagged set; expected filtering, not a failure"""

    def __init__(self, photo_id: int):
        super().__init__(f"{photo_id} is in NO_TAG")
        self.photo_id = photo_id


class MissingGeotagError(KeyError):
    """A ranked tag references a photo id that has no geotag row"""

    def __init__(self, photo_id: int, tag: str):
        super().__init__(photo_id)
        self.photo_id = photo_id
        self.tag = tag

    def __str__(self):
        return f"No geotag for photo {self.photo_id} (tag '{self.tag}')"
