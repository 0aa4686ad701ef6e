"""Collector error hierarchy.

Every failure raised by the collector derives from ``CollectorError`` so the
host pipeline can catch the whole family.  Network failures are the only
kind retried (across location candidates); everything else is terminal for
the include being processed.
"""

from __future__ import annotations

from collections.abc import Sequence


class CollectorError(RuntimeError):
    """Base class for all zip contents collector failures."""


class ConfigError(CollectorError):
    """Raised for invalid configuration: missing include names, unsupported
    version files, version fields that cannot be found."""


class NetworkError(CollectorError):
    """Raised when a download attempt fails at the transport level."""

    def __init__(self, message: str, *, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class HTTPStatusError(NetworkError):
    """Raised when a server answers with anything other than 200 or 304."""

    def __init__(self, message: str, *, url: str, status_code: int) -> None:
        super().__init__(message, url=url)
        self.status_code = status_code


class AggregateDownloadError(NetworkError):
    """Raised when every location candidate for an include failed.

    The rendered message is a header line followed by one ``- <message>``
    bullet per underlying failure, in candidate order.
    """

    def __init__(self, message: str, errors: Sequence[Exception]) -> None:
        self.errors: list[Exception] = list(errors)
        bullets = "".join(f"- {error}\n" for error in self.errors)
        super().__init__(f"{message}:\n{bullets}")


class ArchiveCorruptError(CollectorError):
    """Raised when a selected archive cannot be read as a zip file."""


def raise_if_necessary(message: str, errors: Sequence[Exception]) -> None:
    """Raise the collected download errors, if any.

    A single failure is surfaced directly; several are bundled into an
    ``AggregateDownloadError``.
    """
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise AggregateDownloadError(message, errors)


def is_http_not_found(error: BaseException | None) -> bool:
    """Return ``True`` if *error* is an HTTP 404, or an aggregate of only 404s."""
    if isinstance(error, AggregateDownloadError):
        return all(is_http_not_found(candidate) for candidate in error.errors)
    return isinstance(error, HTTPStatusError) and error.status_code == 404
