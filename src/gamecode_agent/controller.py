"""
Automation Controller

Drives one automation surface through a login or a code submission and
persists or restores the authenticated session through the SessionStore.

One controller is created per inbound operation. Every operation acquires its
own surface and releases it before returning, whatever happened in between.
Only a failure to launch the browser escapes as an exception; every other
fault becomes a False login verdict or a failed SubmissionOutcome.
"""

import logging
from enum import Enum
from typing import Callable, Optional, Union

from .browser.actions import click_candidates, run_with_fallback
from .browser.surface import AutomationSurface, opened
from .classifier import classify
from .config import SiteConfig
from .models import SessionInvalid, SessionRecord, SubmissionOutcome
from .store import SessionStore, now_ms

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    """Lifecycle of one controller. CLOSED is terminal and reachable from anywhere."""

    CREATED = "created"
    INITIALIZED = "initialized"
    LOGGED_IN = "logged_in"
    LOGIN_FAILED = "login_failed"
    SUBMITTED = "submitted"
    SUBMIT_FAILED = "submit_failed"
    CLOSED = "closed"


SurfaceFactory = Callable[[], AutomationSurface]


class AutomationController:
    """
    Orchestrates login, code submission and logout.

    Usage:
        >>> controller = AutomationController(store)
        >>> if await controller.login("user", "secret", "session_1"):
        ...     outcome = await AutomationController(store).submit_code("ABC123", "session_1")
    """

    def __init__(
        self,
        store: SessionStore,
        site: Optional[SiteConfig] = None,
        surface_factory: Optional[SurfaceFactory] = None,
        clock: Callable[[], int] = now_ms,
    ):
        """
        Initialize the controller.

        Args:
            store: Process-wide session store
            site: Target site layout (uses env if None)
            surface_factory: Creates a fresh surface per operation
            clock: Epoch-ms clock used to stamp new session records
        """
        self.store = store
        self.site = site or SiteConfig.from_env()
        self._surface_factory = surface_factory or AutomationSurface
        self._clock = clock
        self.state = ControllerState.CREATED

    def _transition(self, state: ControllerState) -> None:
        logger.debug(f"Controller {self.state.value} -> {state.value}")
        self.state = state

    async def login(
        self,
        username: str,
        password: str,
        session_id: str,
        debug_mode: bool = False,
    ) -> bool:
        """
        Log in and persist the resulting session under session_id.

        Returns:
            True if the site accepted the credentials and the session was saved

        Raises:
            SurfaceInitError: If the browser could not be launched
        """
        surface = self._surface_factory()
        try:
            async with opened(surface, debug_mode):
                self._transition(ControllerState.INITIALIZED)
                try:
                    logged_in = await self._perform_login(surface, username, password)
                    if logged_in:
                        await self._save_session(surface, session_id)
                except Exception as e:
                    logger.error(f"Login error: {e}")
                    logged_in = False

                if logged_in:
                    self._transition(ControllerState.LOGGED_IN)
                    logger.info("Login successful!")
                else:
                    self._transition(ControllerState.LOGIN_FAILED)
                return logged_in
        finally:
            self._transition(ControllerState.CLOSED)

    async def _perform_login(self, surface: AutomationSurface, username: str, password: str) -> bool:
        site = self.site
        logger.info("Attempting to login...")

        await surface.navigate(site.login_url)
        await surface.wait_for_element(site.username_selector, site.element_timeout_ms)

        await surface.fill(site.username_selector, username, site.action_timeout_ms)
        await surface.fill(site.password_selector, password, site.action_timeout_ms)
        await surface.click(site.login_submit_selector, site.action_timeout_ms)

        await surface.wait_for_network_idle(site.network_idle_timeout_ms)

        # Weak signal: a validation error that keeps us on the login page and a
        # redirect elsewhere are the only two cases it can tell apart
        current_url = surface.current_url()
        if site.login_path in current_url:
            logger.info("Login failed - still on login page")
            return False
        return True

    async def _save_session(self, surface: AutomationSurface, session_id: str) -> None:
        record = SessionRecord(
            cookies=await surface.read_cookies(),
            local_state=await surface.read_local_state(),
            created_at=self._clock(),
        )
        self.store.put(session_id, record)

    async def submit_code(
        self,
        code: str,
        session_id: str,
        debug_mode: bool = False,
    ) -> Union[SubmissionOutcome, SessionInvalid]:
        """
        Submit a game code using the stored session.

        Returns:
            SessionInvalid if the session is missing, expired or unusable,
            otherwise the classified SubmissionOutcome

        Raises:
            SurfaceInitError: If the browser could not be launched
        """
        surface = self._surface_factory()
        try:
            async with opened(surface, debug_mode):
                self._transition(ControllerState.INITIALIZED)

                record = self.store.get(session_id)
                if record is None or not await self._restore_session(surface, record):
                    logger.info(f"Session '{session_id}' expired or invalid")
                    self._transition(ControllerState.LOGIN_FAILED)
                    return SessionInvalid(session_id=session_id)
                self._transition(ControllerState.LOGGED_IN)

                try:
                    outcome = await self._perform_submit(surface, code)
                except Exception as e:
                    logger.error(f"Code submission error: {e}")
                    self._transition(ControllerState.SUBMIT_FAILED)
                    return SubmissionOutcome.failed(str(e))

                self._transition(ControllerState.SUBMITTED)
                if outcome.overall_success:
                    logger.info("Code submitted successfully!")
                else:
                    logger.info("Code submission failed or already submitted")
                return outcome
        finally:
            self._transition(ControllerState.CLOSED)

    async def _restore_session(self, surface: AutomationSurface, record: SessionRecord) -> bool:
        try:
            await surface.write_cookies(record.cookies)
            await surface.write_local_state(record.local_state, origin=self.site.origin)
        except Exception as e:
            logger.error(f"Failed to restore session: {e}")
            return False
        logger.info("Session restored")
        return True

    async def _perform_submit(self, surface: AutomationSurface, code: str) -> SubmissionOutcome:
        site = self.site
        logger.info(f"Submitting code: {code}")

        await surface.navigate(site.submit_url)
        await surface.wait_for_element(site.code_input_selector, site.element_timeout_ms)
        await surface.fill(site.code_input_selector, code, site.action_timeout_ms)

        # The form lists one checkbox per player; every player is opted in
        try:
            checked = await surface.check_all(site.checkbox_selector)
            logger.debug(f"Checked {checked} player checkboxes")
        except Exception as e:
            logger.warning(f"Could not check player checkboxes: {e}")

        await run_with_fallback(
            "submit code",
            click_candidates(
                surface,
                [site.submit_primary_selector, site.submit_fallback_selector],
                site.action_timeout_ms,
            ),
        )

        await surface.wait_for_network_idle(site.network_idle_timeout_ms)

        elements = await surface.read_feedback(site.feedback_selector)
        return classify(elements)

    def logout(self, session_id: str) -> None:
        """Forget a session. Idempotent; no browser is involved."""
        self.store.delete(session_id)
