"""
Browser Automation Module

Provides the Playwright-backed automation surface and the candidate-action
fallback policy used for fragile UI steps.
"""

from .actions import CandidateAction, click_candidates, run_with_fallback
from .surface import AutomationSurface, SurfaceConfig, opened

__all__ = [
    "AutomationSurface",
    "SurfaceConfig",
    "opened",
    "CandidateAction",
    "click_candidates",
    "run_with_fallback",
]
