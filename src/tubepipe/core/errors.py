"""Error types raised by extractors and transports."""


class ExtractionError(Exception):
    """Base class for every failure surfaced by tubepipe."""

    def __init__(self, cause: str = "") -> None:
        super().__init__(cause)
        self.cause = cause


class DownloadError(ExtractionError):
    """Transport failure while fetching a page or script."""


class ParsingError(ExtractionError):
    """Structural mismatch in a fetched document.

    ``kind`` separates a lookup chain that stopped at an absent hop from one
    that reached a value of the wrong type. Both surface as ParsingError.
    """

    MISSING = "missing"
    WRONG_TYPE = "wrong_type"
    MISMATCH = "mismatch"

    def __init__(self, cause: str = "", kind: str = MISMATCH) -> None:
        super().__init__(cause)
        self.kind = kind

    @classmethod
    def missing(cls, what: str) -> "ParsingError":
        return cls(f"{what} not found", kind=cls.MISSING)

    @classmethod
    def wrong_type(cls, what: str, expected: type, got: object) -> "ParsingError":
        return cls(
            f"{what} is {type(got).__name__}, expected {expected.__name__}",
            kind=cls.WRONG_TYPE,
        )


class AgeRestrictedError(ExtractionError):
    """The video is age restricted and cannot be resolved anonymously."""

    def __init__(self, cause: str = "Video is age restricted") -> None:
        super().__init__(cause)


class NothingFoundError(ParsingError):
    """A listing's content node is absent from an otherwise valid response."""

    def __init__(self, cause: str = "Nothing found") -> None:
        super().__init__(cause, ParsingError.MISSING)
