# goldwatch/scrapers/errors.py

"""Error taxonomy for a single fetch/extract cycle."""


class GoldwatchError(Exception):
    """Base class for recoverable tick failures."""


class FetchError(GoldwatchError):
    """The source page could not be retrieved.

    Exactly one of ``status`` (non-200 HTTP response) or ``cause``
    (transport failure such as a timeout) is normally set.
    """

    def __init__(
        self,
        url: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.url = url
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"HTTP {status} from {url}"
        elif cause is not None:
            message = f"request to {url} failed: {cause}"
        else:
            message = f"request to {url} failed"
        super().__init__(message)


class ParseError(GoldwatchError):
    """The page did not expose every required anchor field."""

    def __init__(
        self, message: str, missing: tuple[str, ...] = (),
    ) -> None:
        self.missing = missing
        super().__init__(message)
