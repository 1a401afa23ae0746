"""Colour tokens shared by layers and annotations."""

from __future__ import annotations

from typing import Dict, Iterable

PALETTE = (
    "#1b9e77",
    "#d95f02",
    "#7570b3",
    "#e7298a",
    "#66a61e",
    "#e6ab02",
    "#a6761d",
    "#666666",
)

HIGHLIGHT = "#d7301f"
MUTED = "#9e9e9e"
TEXT = "#222222"
LABEL_FILL = "#ffffff"


def group_colors(levels: Iterable[object]) -> Dict[object, str]:
    """Map each distinct level (sorted) to a palette colour, cycling if needed."""
    ordered = sorted(set(levels), key=lambda v: str(v))
    return {level: PALETTE[i % len(PALETTE)] for i, level in enumerate(ordered)}
