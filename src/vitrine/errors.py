"""Exception hierarchy for Vitrine."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

#: Error strings surfaced in outcomes are clipped to this many characters.
MAX_ERROR_CHARS = 200


class VitrineError(Exception):
    """Base exception for all Vitrine errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(VitrineError):
    """Configuration validation or resolution failed."""


class NoProviderConfigured(ConfigurationError):
    """No image provider credential is configured; the whole batch fails."""


class InputError(VitrineError):
    """Caller input (prompt list or single prompt) is invalid."""


class AdapterError(VitrineError):
    """A provider call failed.

    Adapters attach a structured ``code`` so retry decisions never depend on
    the wording of the message.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        provider: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.provider = provider
        self.code = code
        self.status_code = status_code

    @property
    def short_message(self) -> str:
        """Message clipped for in-band reporting."""
        return truncate(str(self))


class AdapterTransientError(AdapterError):
    """Transport-level failure (reset, timeout, abort)."""


class AdapterApplicationError(AdapterError):
    """Non-2xx response, malformed payload, or provider-reported failure."""


class ResponseShapeMismatch(AdapterApplicationError):
    """The call succeeded but the output field was absent or unparseable."""


def truncate(message: object, limit: int = MAX_ERROR_CHARS) -> str:
    """Return ``str(message)`` clipped to *limit* characters."""
    return str(message)[:limit]


def walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
