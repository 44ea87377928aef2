"""
Overall Vibe — Map three tallies onto a single mood label.

A plain decision table over percentages, checked top to bottom.
Counts are located by substring so decorated option names
("Good Vibes ✨") still match.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from ..models.vibes import VibeOption

GOOD_LABEL = "Good Vibes"
NEUTRAL_LABEL = "Neutral Vibes"
BAD_LABEL = "Bad Vibes"

CHECKING = "Checking the vibes..."
NO_VIBES = "No vibes yet!"
NO_VOTES = "No votes yet!"
PURE_GOOD = "✨ Pure Good Vibes! ✨"
CHILL = "😌 Chill Vibes, mostly good."
SERIOUSLY_BAD = "😬 Some seriously bad vibes brewing..."
LEAN_NEGATIVE = "🧐 Mixed vibes, lean negative."
BALANCED = "⚖️ Neutral vibes, balanced."


def _count_for(vibes: Iterable[VibeOption], label: str) -> int:
    for vibe in vibes:
        if label in vibe.name:
            return vibe.count
    return 0


def split_counts(vibes: Iterable[VibeOption]) -> Tuple[int, int, int]:
    """Return the (good, neutral, bad) tallies; missing options count as 0."""
    vibes = list(vibes)
    return (
        _count_for(vibes, GOOD_LABEL),
        _count_for(vibes, NEUTRAL_LABEL),
        _count_for(vibes, BAD_LABEL),
    )


def classify_vibe(good: int, neutral: int, bad: int) -> str:
    """
    Classify raw tallies.
    
    Examples:
        (70, 10, 20) -> PURE_GOOD
        (0, 0, 0)    -> NO_VOTES
        (10, 10, 45) -> SERIOUSLY_BAD  (bad ≈ 69%)
    """
    total = good + neutral + bad
    if total == 0:
        return NO_VOTES
    
    good_pct = good / total * 100
    bad_pct = bad / total * 100
    
    if good_pct > 60:
        return PURE_GOOD
    elif good_pct > 30 and bad_pct < 20:
        return CHILL
    elif bad_pct > 40:
        return SERIOUSLY_BAD
    elif bad_pct > 20:
        return LEAN_NEGATIVE
    else:
        return BALANCED


def overall_vibe(vibes: Iterable[VibeOption]) -> str:
    """Label for a full ledger read."""
    vibes = list(vibes)
    if not vibes:
        return NO_VIBES
    return classify_vibe(*split_counts(vibes))
