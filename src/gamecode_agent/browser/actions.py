"""
Fallback Actions

Fragile UI steps are modelled as an ordered list of candidate actions. Each
candidate is tried in turn until one succeeds; when the list runs out the
step fails with ActionFallbackExhausted carrying every attempt.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from ..errors import ActionFallbackExhausted
from ..models import FallbackChain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateAction:
    """One way of performing a UI step."""

    name: str
    run: Callable[[], Awaitable[None]]


def click_candidates(surface, selectors: Sequence[str], timeout_ms: int) -> list[CandidateAction]:
    """Build one click candidate per selector, in the given order."""

    def make(selector: str) -> CandidateAction:
        async def run() -> None:
            await surface.click(selector, timeout_ms)

        return CandidateAction(name=selector, run=run)

    return [make(selector) for selector in selectors]


async def run_with_fallback(label: str, candidates: Sequence[CandidateAction]) -> FallbackChain:
    """
    Try candidates in order until one succeeds.

    Args:
        label: Name of the UI step, for logs and errors
        candidates: Candidate actions, primary first

    Returns:
        The FallbackChain recording every attempt, ending with the success

    Raises:
        ActionFallbackExhausted: If every candidate failed
    """
    chain = FallbackChain(label=label, candidates=[candidate.name for candidate in candidates])

    for candidate in candidates:
        start_time = time.monotonic()
        try:
            await candidate.run()
        except Exception as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            chain.add_attempt(candidate.name, success=False, duration_ms=duration_ms, error=str(e))
            logger.warning(f"[Fallback] '{label}' candidate '{candidate.name}' failed: {e}")
            chain.advance()
            continue

        duration_ms = int((time.monotonic() - start_time) * 1000)
        chain.add_attempt(candidate.name, success=True, duration_ms=duration_ms)
        logger.info(f"[Fallback] '{label}' succeeded with '{candidate.name}' in {duration_ms}ms")
        return chain

    logger.error(f"[Fallback] All {len(candidates)} candidates exhausted for '{label}'")
    raise ActionFallbackExhausted(chain)
