"""
Game Code Service

The contract offered to the calling layer (an HTTP router, the CLI, ...).
Every handler returns an ApiResponse carrying an HTTP-style status code and
a JSON-ready body; none of them raises.

Usage:
    >>> service = create_service()
    >>> response = await service.login("user", "secret", "session_1")
    >>> response.status_code
    200
"""

import logging
import random
import re
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .browser.surface import AutomationSurface, SurfaceConfig
from .config import SiteConfig
from .controller import AutomationController
from .errors import SurfaceInitError
from .models import SessionInvalid
from .store import SessionStore

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")
_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class ApiResponse:
    """HTTP-style result of a service call."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def normalize_code(code: str) -> str:
    """Strip everything but ASCII letters and digits from a recognised code."""
    return _NON_ALPHANUMERIC.sub("", code or "")


def generate_session_id() -> str:
    """Return a fresh id of the form ``session_<epoch-ms>_<9 base36 chars>``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class GameCodeService:
    """
    Maps automation results onto the calling-layer contract.

    A new AutomationController (and so a new browser) is created for every
    login and submission; the SessionStore is shared.
    """

    def __init__(
        self,
        store: SessionStore,
        site: Optional[SiteConfig] = None,
        surface_config: Optional[SurfaceConfig] = None,
        controller_factory=None,
    ):
        self.store = store
        self.site = site or SiteConfig.from_env()
        self.surface_config = surface_config
        self._controller_factory = controller_factory or self._default_controller

    def _default_controller(self) -> AutomationController:
        return AutomationController(
            self.store,
            site=self.site,
            surface_factory=lambda: AutomationSurface(self.surface_config),
        )

    async def login(
        self,
        username: str,
        password: str,
        session_id: str,
        debug_mode: bool = False,
    ) -> ApiResponse:
        if not username or not password or not session_id:
            return ApiResponse(400, {"error": "Missing required fields"})

        try:
            success = await self._controller_factory().login(
                username, password, session_id, debug_mode
            )
        except SurfaceInitError as e:
            logger.error(f"Login API error: {e}")
            return ApiResponse(500, {"success": False, "message": "Server error"})
        except Exception:
            logger.exception("Login API error")
            return ApiResponse(500, {"success": False, "message": "Server error"})

        if success:
            return ApiResponse(200, {"success": True, "message": "Login successful"})
        return ApiResponse(401, {"success": False, "message": "Login failed"})

    async def submit_code(
        self,
        code: str,
        session_id: str,
        debug_mode: bool = False,
    ) -> ApiResponse:
        code = normalize_code(code)
        if not code or not session_id:
            return ApiResponse(400, {"error": "Missing required fields"})

        try:
            result = await self._controller_factory().submit_code(code, session_id, debug_mode)
        except SurfaceInitError as e:
            logger.error(f"Submit code API error: {e}")
            return ApiResponse(500, {"success": False, "message": "Server error"})
        except Exception:
            logger.exception("Submit code API error")
            return ApiResponse(500, {"success": False, "message": "Server error"})

        if isinstance(result, SessionInvalid):
            return ApiResponse(401, {"success": False, "message": "Session expired or invalid"})

        body: dict[str, Any] = {
            "success": result.overall_success,
            "message": (
                "Code submitted successfully"
                if result.overall_success
                else "Code submission failed or already submitted"
            ),
            "messages": [message.to_json_dict() for message in result.messages],
        }
        if result.error:
            body["error"] = result.error
        return ApiResponse(200, body)

    def logout(self, session_id: Optional[str]) -> ApiResponse:
        if session_id:
            self._controller_factory().logout(session_id)
        return ApiResponse(200, {"success": True, "message": "Logged out successfully"})

    def health(self) -> ApiResponse:
        return ApiResponse(
            200,
            {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()},
        )


def create_service(
    site: Optional[SiteConfig] = None,
    surface_config: Optional[SurfaceConfig] = None,
) -> GameCodeService:
    """
    Build a service with a store loaded from the configured session file.

    Args:
        site: Target site layout (uses env if None)
        surface_config: Browser settings (uses env if None)
    """
    site = site or SiteConfig.from_env()
    store = SessionStore(site.session_file, ttl_ms=site.session_ttl_ms)
    store.load()
    return GameCodeService(store, site=site, surface_config=surface_config)
