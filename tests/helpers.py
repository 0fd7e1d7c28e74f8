"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off provider classes as coverage expands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from collections.abc import Callable

    from vitrine.providers.base import ProviderKind
    from vitrine.retry import RetryPolicy


@dataclass
class FakeClock:
    """Monotonic clock plus an awaitable sleep that only advances the clock."""

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@dataclass
class ScriptedProvider:
    """Adapter double that returns a scripted sequence of URLs/exceptions.

    Records each prompt together with the clock reading at call start, and
    advances the clock by ``call_duration_s`` to simulate network time.
    """

    script: list[str | BaseException] = field(default_factory=list)
    provider_kind: ProviderKind = "siliconflow"
    policy: RetryPolicy | None = None
    clock: FakeClock | None = None
    call_duration_s: float = 0.0
    calls: list[tuple[str, float]] = field(default_factory=list)
    closed: bool = False

    @property
    def kind(self) -> ProviderKind:
        return self.provider_kind

    @property
    def retry_policy(self) -> RetryPolicy | None:
        return self.policy

    async def render(self, prompt: str) -> str:
        started = self.clock() if self.clock is not None else 0.0
        self.calls.append((prompt, started))
        if self.clock is not None:
            self.clock.now += self.call_duration_s
        if not self.script:
            return f"https://img.test/{prompt}.png"
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class RecordingHandler:
    """``httpx.MockTransport`` handler replaying scripted responses.

    Each script entry is an ``httpx.Response``, an exception to raise, or a
    callable building either from the request.
    """

    script: list[Any] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script.pop(0) if self.script else httpx.Response(500)
        if callable(item) and not isinstance(item, httpx.Response):
            item = item(request)
        if isinstance(item, BaseException):
            raise item
        return item

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests]


def raising(
    exc_type: type[httpx.TransportError], message: str = "boom"
) -> Callable[[httpx.Request], BaseException]:
    """Build a script entry that raises *exc_type* bound to the request."""

    def build(request: httpx.Request) -> BaseException:
        return exc_type(message, request=request)

    return build
