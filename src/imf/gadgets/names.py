"""Gadget name generation.

Names have the form ``the-<adjective>-<noun>``: 16 adjectives x 16 nouns, so
256 possible names. Uniqueness is enforced by the database; callers retry on
collision (see ``imf.gadgets.service.create_gadget``).
"""

from __future__ import annotations

import random

ADJECTIVES: tuple[str, ...] = (
    "silent", "shadow", "ghost", "blazing", "crimson", "mighty",
    "phantom", "steel", "night", "frost", "vengeful", "stormy",
    "lone", "silver", "venomous", "arcane",
)

NOUNS: tuple[str, ...] = (
    "falcon", "panther", "hawk", "blade", "dagger", "raven",
    "phantom", "vigil", "hound", "knight", "serpent", "phantasm",
    "warden", "prowler", "sting", "sentinel",
)

NAME_PREFIX = "the"

_rng = random.Random()


def generate_gadget_name(rng: random.Random | None = None) -> str:
    """Pick an adjective and a noun independently and join them as ``the-<adjective>-<noun>``."""
    source = rng or _rng
    adjective = source.choice(ADJECTIVES)
    noun = source.choice(NOUNS)
    return f"{NAME_PREFIX}-{adjective}-{noun}"


def all_gadget_names() -> list[str]:
    """Every name ``generate_gadget_name`` can produce."""
    return [f"{NAME_PREFIX}-{a}-{n}" for a in ADJECTIVES for n in NOUNS]
