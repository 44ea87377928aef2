"""
Vote Path — Consult the censorship flag, then count (or silently drop).
"""

from __future__ import annotations

import logging

from ..models.vibes import VoteResult
from ..store.base import Backend
from ..validation import ValidationError
from .censorship import censorship_active, is_suppressed

logger = logging.getLogger(__name__)


def cast_vote(backend: Backend, vibe_name: str) -> VoteResult:
    """
    Record one vote for ``vibe_name``.

    When censorship is on and the name is in the suppressed category the
    result is ``censored=True`` and the ledger is not touched; the caller
    is expected to present this as a received vote.

    Raises:
        ValidationError: Empty name
        UnknownVibeError: No ledger row with that exact name
        BackendError: The increment failed
    """
    if not vibe_name:
        raise ValidationError("Vibe name is required", field="vibeName")

    if censorship_active(backend) and is_suppressed(vibe_name):
        logger.warning(
            f'CENSORSHIP ACTIVE: A vote for "{vibe_name}" was blocked.',
            extra={"vibe_name": vibe_name, "censored": True},
        )
        return VoteResult(censored=True)

    vibe = backend.increment_vibe(vibe_name)
    logger.info(
        f"Vote for {vibe.name} counted (now {vibe.count})",
        extra={"vibe_name": vibe.name, "censored": False},
    )
    return VoteResult(vibe=vibe)
