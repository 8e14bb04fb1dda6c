"""Cosmetic per-request listing metadata. Nothing here is persisted."""

from __future__ import annotations

import random

_rng = random.Random()


def success_probability(rng: random.Random | None = None) -> int:
    """Uniform integer in 1..100, drawn fresh on every call."""
    return (rng or _rng).randint(1, 100)


def format_display_line(name: str, probability: int) -> str:
    return f"{name} - {probability}% success probability"
