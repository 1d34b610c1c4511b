"""
Shared fixtures: a recording fake automation surface and a temporary store.
"""

from pathlib import Path
from typing import Any, Optional

import pytest

from gamecode_agent.config import SiteConfig
from gamecode_agent.errors import ElementTimeout, SurfaceInitError
from gamecode_agent.models import RawFeedback
from gamecode_agent.store import SessionStore


class FakeSurface:
    """
    Stands in for AutomationSurface.

    Records every call in ``calls`` and raises the exception registered in
    ``faults`` for a step name, or in ``click_faults`` for a click selector.
    """

    def __init__(
        self,
        url_after_login: str = "https://aadl.org/user/42",
        cookies: Optional[list[dict[str, Any]]] = None,
        local_state: Optional[dict[str, str]] = None,
        feedback: Optional[list[RawFeedback]] = None,
    ):
        self.url_after_login = url_after_login
        self.cookies = cookies if cookies is not None else [
            {"name": "SESS1", "value": "abc", "domain": ".aadl.org", "path": "/"}
        ]
        self.local_state = local_state if local_state is not None else {"theme": "dark"}
        self.feedback = feedback or []
        self.faults: dict[str, BaseException] = {}
        self.click_faults: dict[str, BaseException] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.open_calls = 0
        self.close_calls = 0
        self.restored_cookies: list[dict[str, Any]] = []
        self.restored_local_state: dict[str, str] = {}
        self._url = "about:blank"

    def _step(self, name: str, *args) -> None:
        self.calls.append((name, args))
        if name in self.faults:
            raise self.faults[name]

    def called(self, name: str) -> list[tuple]:
        return [args for step, args in self.calls if step == name]

    async def open(self, debug: bool = False) -> None:
        self.open_calls += 1
        self._step("open", debug)

    async def close(self) -> list:
        self.close_calls += 1
        self.calls.append(("close", ()))
        return []

    async def navigate(self, url: str, timeout_ms=None) -> None:
        self._step("navigate", url)
        self._url = url

    async def wait_for_element(self, selector: str, timeout_ms: int) -> None:
        self._step("wait_for_element", selector, timeout_ms)

    async def fill(self, selector: str, value: str, timeout_ms=None) -> None:
        self._step("fill", selector, value)

    async def click(self, selector: str, timeout_ms=None) -> None:
        self._step("click", selector)
        if selector in self.click_faults:
            raise self.click_faults[selector]
        if "/user/login" in self._url:
            self._url = self.url_after_login

    async def wait_for_network_idle(self, timeout_ms=None) -> None:
        self._step("wait_for_network_idle")

    def current_url(self) -> str:
        return self._url

    async def read_cookies(self) -> list[dict[str, Any]]:
        self._step("read_cookies")
        return [dict(cookie) for cookie in self.cookies]

    async def write_cookies(self, cookies: list[dict[str, Any]]) -> None:
        self._step("write_cookies", cookies)
        self.restored_cookies = list(cookies)

    async def read_local_state(self) -> dict[str, str]:
        self._step("read_local_state")
        return dict(self.local_state)

    async def write_local_state(self, state: dict[str, str], origin=None) -> None:
        self._step("write_local_state", state, origin)
        self.restored_local_state = dict(state)

    async def check_all(self, selector: str) -> int:
        self._step("check_all", selector)
        return 2

    async def read_feedback(self, selector: str) -> list[RawFeedback]:
        self._step("read_feedback", selector)
        return list(self.feedback)


@pytest.fixture
def site() -> SiteConfig:
    return SiteConfig(
        base_url="https://aadl.org",
        element_timeout_ms=100,
        network_idle_timeout_ms=100,
        action_timeout_ms=100,
    )


@pytest.fixture
def clock():
    """Controllable epoch-ms clock. Set ``clock.now`` to move time."""

    class Clock:
        now = 1_700_000_000_000

        def __call__(self) -> int:
            return self.now

    return Clock()


@pytest.fixture
def store(tmp_path: Path, clock) -> SessionStore:
    return SessionStore(tmp_path / "sessions.json", clock=clock)


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


# Re-exported so tests can build their own fakes and faults
@pytest.fixture
def fake_surface_cls():
    return FakeSurface


@pytest.fixture
def surface_faults():
    """Exceptions injected for each step in fault tests."""
    return {
        "open": SurfaceInitError("browser executable missing"),
        "navigate": RuntimeError("net::ERR_NAME_NOT_RESOLVED"),
        "wait_for_element": ElementTimeout("input", 100),
        "fill": RuntimeError("element is not editable"),
        "wait_for_network_idle": RuntimeError("Timeout 100ms exceeded"),
        "read_cookies": RuntimeError("context closed"),
        "read_local_state": RuntimeError("localStorage denied"),
        "read_feedback": RuntimeError("execution context destroyed"),
    }
