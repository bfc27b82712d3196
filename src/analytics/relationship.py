"""
Plain-language labels for a correlation score.

Used by the relationship story, the correlation card and the API payloads.
All functions are pure; an undefined correlation (None) is only accepted by
describe_correlation(), which turns it into a neutral message.
"""

from typing import Any, Dict, Optional

from constants import MODERATE_CORRELATION, STORY_THRESHOLD, STRONG_CORRELATION

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"

_STORY_IMAGES = {
    POSITIVE: "/images/relationship_pos.webp",
    NEGATIVE: "/images/relationship_neg.webp",
    NEUTRAL: "/images/relationship_neut.webp",
}


def connection_strength(r: float) -> str:
    strength = abs(r)
    if strength > STRONG_CORRELATION:
        return "Strong"
    if strength >= MODERATE_CORRELATION:
        return "Moderate"
    return "Weak"


def correlation_direction(r: float) -> str:
    if r > 0:
        return "Positive"
    if r < 0:
        return "Negative"
    return "No relationship"


def relationship_type(r: float) -> str:
    if r > STORY_THRESHOLD:
        return POSITIVE
    if r < -STORY_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def relationship_story(r: float, primary_name: str, comparison_name: str) -> Dict[str, Any]:
    """Headline and one-sentence reading of r for the story widget."""
    kind = relationship_type(r)
    if kind == POSITIVE:
        headline = "They Move in Sync"
        description = (
            f"This means that when {comparison_name} goes up, "
            f"{primary_name} also tends to go up."
        )
    elif kind == NEGATIVE:
        headline = "It's a See-Saw Effect"
        description = (
            f"This means that when {comparison_name} goes up, "
            f"{primary_name} tends to go down."
        )
    else:
        headline = "No Clear Pattern"
        description = (
            "There doesn't appear to be a consistent relationship between "
            "these two metrics in the selected period."
        )
    return {
        "type": kind,
        "strength": connection_strength(r),
        "headline": headline,
        "description": description,
        "image": _STORY_IMAGES[kind],
        "score": f"{r:.3f}",
    }


def correlation_card(r: float, primary_name: str, comparison_name: str) -> Dict[str, Any]:
    strength = connection_strength(r)
    direction = correlation_direction(r)
    if r > 0:
        title = f"{strength} {direction} Correlation"
        explanation = f"When {primary_name} goes up, {comparison_name} tends to go up."
    elif r < 0:
        title = f"{strength} {direction} Correlation"
        explanation = f"When {primary_name} goes up, {comparison_name} tends to go down."
    else:
        title = "No Correlation"
        explanation = (
            f"There is no clear relationship between {primary_name} and {comparison_name}."
        )
    return {
        "title": title,
        "strength": strength,
        "direction": direction,
        "score": f"{r:.3f}",
        "explanation": explanation,
        # -1 sits at the left edge of the scale bar, +1 at the right
        "marker_position_pct": (r + 1) / 2 * 100,
    }


def describe_correlation(
    r: Optional[float], primary_name: str, comparison_name: str
) -> Dict[str, Any]:
    """Story and card for r, or a neutral payload when r is undefined."""
    if r is None:
        return {
            "defined": False,
            "headline": "No Clear Relationship Yet",
            "message": (
                f"Not enough paired data to find a clear relationship between "
                f"{primary_name} and {comparison_name} yet. Keep logging both metrics."
            ),
        }
    return {
        "defined": True,
        "story": relationship_story(r, primary_name, comparison_name),
        "card": correlation_card(r, primary_name, comparison_name),
    }
