"""Stable per-person colours for roster cells."""
from __future__ import annotations

import hashlib
from typing import Dict, Optional

Color = Dict[str, str]

# Bright pastels; every entry is readable with black text
PALETTE: tuple[Color, ...] = tuple(
    {"bg": bg, "text": "#000000", "border": border}
    for bg, border in (
        ("#FFB3B3", "#FF8080"),
        ("#FFD9B3", "#FFBF80"),
        ("#FFFFB3", "#FFFF80"),
        ("#B3FFB3", "#80FF80"),
        ("#B3FFFF", "#80FFFF"),
        ("#B3D9FF", "#80BFFF"),
        ("#D9B3FF", "#BF80FF"),
        ("#FFB3E6", "#FF80D4"),
        ("#FFCCCC", "#FF9999"),
        ("#FFE5CC", "#FFCC99"),
        ("#E6FFB3", "#D4FF80"),
        ("#B3FFE6", "#80FFD4"),
        ("#CCE5FF", "#99CCFF"),
        ("#E6CCFF", "#D699FF"),
        ("#FFCCE5", "#FF99CC"),
        ("#FFE6B3", "#FFD480"),
        ("#C2F0C2", "#99E699"),
        ("#C2E0F0", "#99CCE6"),
        ("#F0C2E0", "#E699CC"),
        ("#F0E6C2", "#E6D499"),
        ("#C2F0F0", "#99E6E6"),
        ("#E0C2F0", "#CC99E6"),
        ("#F0D9C2", "#E6C299"),
        ("#D9F0C2", "#C2E699"),
    )
)

UNASSIGNED: Color = {"bg": "#6c757d", "text": "#FFFFFF", "border": "#7d868f"}


def user_color(user_id: Optional[int]) -> Color:
    if user_id is None:
        return dict(UNASSIGNED)
    return dict(PALETTE[(user_id - 1) % len(PALETTE)])


def name_color(name: Optional[str]) -> Color:
    """Colour for people without a user id, such as visiting preachers."""
    if not name:
        return dict(UNASSIGNED)
    digest = hashlib.sha1(name.encode("utf-8")).digest()
    return dict(PALETTE[int.from_bytes(digest[:4], "big") % len(PALETTE)])
