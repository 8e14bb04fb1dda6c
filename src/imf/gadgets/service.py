"""Gadget lifecycle business logic.

Rules:
- Names are server-generated and globally unique; creation retries on a name
  collision, at most 5 attempts
- Only AVAILABLE and DEPLOYED are reachable through the generic status update
- Decommissioning and destruction are terminal; a terminal gadget is treated
  as not found by every mutation
- Self-destruct is two-phase: initiate stores a code, confirm with the same
  code destroys. Re-initiating replaces the pending code
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from imf.config import get_settings
from imf.db.models import ACTIVE_STATUSES, TERMINAL_STATUSES, Gadget, GadgetStatus
from imf.gadgets.codes import codes_match, generate_confirmation_code
from imf.gadgets.exceptions import (
    GadgetNotFoundError,
    InvalidConfirmationCodeError,
    InvalidStatusError,
    NameExhaustionError,
)
from imf.gadgets.names import generate_gadget_name

logger = structlog.get_logger()

MAX_NAME_ATTEMPTS = 5


def normalize_status(value: str | None) -> GadgetStatus:
    """Upper-case and validate a status for update or filtering.

    Raises InvalidStatusError unless the value is AVAILABLE or DEPLOYED.
    """
    if not value or not value.strip():
        raise InvalidStatusError
    try:
        status = GadgetStatus(value.strip().upper())
    except ValueError:
        raise InvalidStatusError from None
    if status not in ACTIVE_STATUSES:
        raise InvalidStatusError
    return status


def _is_name_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "uq_gadgets_name" in message or "gadgets.name" in message


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def _get_owned_gadget(db: AsyncSession, owner_id: str, gadget_id: str) -> Gadget:
    """Fetch a gadget the caller may mutate.

    Absent, foreign and terminal gadgets all raise GadgetNotFoundError; only
    the log line tells them apart.
    """
    result = await db.execute(select(Gadget).where(Gadget.id == gadget_id))
    gadget = result.scalar_one_or_none()

    reason: str | None = None
    if gadget is None:
        reason = "absent"
    elif gadget.owner_id != owner_id:
        reason = "wrong_owner"
    elif GadgetStatus(gadget.status) in TERMINAL_STATUSES:
        reason = "terminal"

    if reason is not None:
        logger.info("gadget_lookup_denied", gadget_id=gadget_id, owner_id=owner_id, reason=reason)
        raise GadgetNotFoundError
    return gadget


async def list_gadgets(db: AsyncSession, owner_id: str, status: str | None = None) -> list[Gadget]:
    """List the caller's gadgets, optionally filtered by AVAILABLE or DEPLOYED.

    Without a filter only AVAILABLE and DEPLOYED gadgets are returned.
    """
    if status:
        statuses = [normalize_status(status).value]
    else:
        statuses = sorted(s.value for s in ACTIVE_STATUSES)

    result = await db.execute(
        select(Gadget)
        .where(Gadget.owner_id == owner_id, Gadget.status.in_(statuses))
        .order_by(Gadget.created_at.asc(), Gadget.name.asc())
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def create_gadget(
    db: AsyncSession,
    owner_id: str,
    *,
    rng: random.Random | None = None,
) -> Gadget:
    """Create an AVAILABLE gadget with a unique generated name.

    Each attempt inserts inside a savepoint so a name collision only rolls
    back that attempt.
    """
    for attempt in range(1, MAX_NAME_ATTEMPTS + 1):
        name = generate_gadget_name(rng)
        gadget = Gadget(name=name, status=GadgetStatus.AVAILABLE.value, owner_id=owner_id)
        try:
            async with db.begin_nested():
                db.add(gadget)
        except IntegrityError as exc:
            if not _is_name_conflict(exc):
                raise
            logger.info("gadget_name_collision", name=name, attempt=attempt, owner_id=owner_id)
            continue

        logger.info("gadget_created", gadget_id=gadget.id, name=name, owner_id=owner_id, attempts=attempt)
        return gadget

    logger.error("gadget_name_exhausted", owner_id=owner_id, attempts=MAX_NAME_ATTEMPTS)
    raise NameExhaustionError


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------


async def update_gadget_status(db: AsyncSession, owner_id: str, gadget_id: str, status: str) -> Gadget:
    """Move a gadget between AVAILABLE and DEPLOYED."""
    target = normalize_status(status)
    gadget = await _get_owned_gadget(db, owner_id, gadget_id)

    previous = gadget.status
    gadget.status = target.value
    await db.flush()
    logger.info("gadget_status_updated", gadget_id=gadget.id, owner_id=owner_id, old=previous, new=target.value)
    return gadget


async def decommission_gadget(db: AsyncSession, owner_id: str, gadget_id: str) -> Gadget:
    """Soft-delete a gadget. One-way."""
    gadget = await _get_owned_gadget(db, owner_id, gadget_id)

    gadget.status = GadgetStatus.DECOMMISSIONED.value
    gadget.decommissioned_at = datetime.now(timezone.utc)
    gadget.confirmation_code = None
    gadget.confirmation_issued_at = None
    await db.flush()
    logger.info("gadget_decommissioned", gadget_id=gadget.id, owner_id=owner_id)
    return gadget


# ---------------------------------------------------------------------------
# Self-destruct
# ---------------------------------------------------------------------------


async def initiate_self_destruct(
    db: AsyncSession,
    owner_id: str,
    gadget_id: str,
    *,
    rng: random.Random | None = None,
) -> Gadget:
    """Issue a confirmation code for the gadget. Status is left unchanged."""
    gadget = await _get_owned_gadget(db, owner_id, gadget_id)

    replaced = gadget.confirmation_code is not None
    gadget.confirmation_code = generate_confirmation_code(rng)
    gadget.confirmation_issued_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("self_destruct_initiated", gadget_id=gadget.id, owner_id=owner_id, replaced_pending=replaced)
    return gadget


def _code_expired(gadget: Gadget, ttl_minutes: int) -> bool:
    if ttl_minutes <= 0 or gadget.confirmation_issued_at is None:
        return False
    age = datetime.now(timezone.utc) - _as_utc(gadget.confirmation_issued_at)
    return age > timedelta(minutes=ttl_minutes)


async def confirm_self_destruct(db: AsyncSession, owner_id: str, gadget_id: str, code: str) -> Gadget:
    """Destroy the gadget if ``code`` matches the pending confirmation code.

    On any mismatch the gadget is left untouched.
    """
    gadget = await _get_owned_gadget(db, owner_id, gadget_id)

    if gadget.confirmation_code is None:
        raise InvalidConfirmationCodeError("No self-destruct pending for this gadget")

    if _code_expired(gadget, get_settings().self_destruct_code_ttl_minutes):
        logger.info("self_destruct_code_expired", gadget_id=gadget.id, owner_id=owner_id)
        raise InvalidConfirmationCodeError("Confirmation code has expired. Initiate self-destruct again.")

    if not codes_match(gadget.confirmation_code, code):
        logger.warning("self_destruct_code_mismatch", gadget_id=gadget.id, owner_id=owner_id)
        raise InvalidConfirmationCodeError

    gadget.status = GadgetStatus.DESTROYED.value
    gadget.destroyed_at = datetime.now(timezone.utc)
    gadget.confirmation_code = None
    gadget.confirmation_issued_at = None
    await db.flush()
    logger.info("gadget_destroyed", gadget_id=gadget.id, owner_id=owner_id)
    return gadget
