"""Gadget lifecycle errors.

Each carries the HTTP status the router maps it to.
"""

from __future__ import annotations


class GadgetError(Exception):
    """Base class for gadget lifecycle failures."""

    status_code: int = 400
    default_message: str = "Gadget operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NameExhaustionError(GadgetError):
    """No unique name could be generated within the retry budget."""

    status_code = 500
    default_message = "Could not generate a unique gadget name. Please try again later."


class GadgetNotFoundError(GadgetError):
    """Gadget cannot be acted on by the caller.

    Missing, foreign and terminal gadgets all map here.
    """

    status_code = 404
    default_message = "Gadget not found"


class InvalidConfirmationCodeError(GadgetError):
    """Self-destruct confirmation code is missing, wrong or expired."""

    status_code = 400
    default_message = "Invalid confirmation code"


class InvalidStatusError(GadgetError):
    """Requested status is outside the values allowed for the operation."""

    status_code = 400
    default_message = "Invalid status. Allowed statuses are: AVAILABLE, DEPLOYED"
