"""Gadget API endpoints: all /api/v1/gadgets/* routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from imf.auth.dependencies import get_current_user
from imf.database import get_session
from imf.db.models import User
from imf.gadgets.display import format_display_line, success_probability
from imf.gadgets.exceptions import GadgetError
from imf.gadgets.schemas import (
    GadgetListResponse,
    GadgetResponse,
    GadgetSummary,
    SelfDestructInitiatedResponse,
    SelfDestructRequest,
    UpdateGadgetStatusRequest,
)
from imf.gadgets.service import (
    confirm_self_destruct,
    create_gadget,
    decommission_gadget,
    initiate_self_destruct,
    list_gadgets,
    update_gadget_status,
)

router = APIRouter(prefix="/api/v1/gadgets", tags=["Gadgets"])


def _http_error(exc: GadgetError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))


@router.get("", response_model=GadgetListResponse)
async def list_gadgets_endpoint(
    status: str | None = Query(None, description="available or deployed (case-insensitive)"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GadgetListResponse:
    """List the caller's active gadgets with a fresh success probability each."""
    try:
        gadgets = await list_gadgets(db, user.id, status)
    except GadgetError as e:
        raise _http_error(e) from e

    items = [
        GadgetSummary(
            id=g.id,
            name=g.name,
            status=g.status,
            display=format_display_line(g.name, success_probability()),
        )
        for g in gadgets
    ]
    message = f"Gadgets of type {status.upper()} fetched successfully" if status else "All gadgets fetched successfully"
    return GadgetListResponse(message=message, gadgets=items)


@router.post("", response_model=GadgetResponse, status_code=201)
async def create_gadget_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GadgetResponse:
    """Create a gadget with a generated name."""
    try:
        gadget = await create_gadget(db, user.id)
        await db.commit()
    except GadgetError as e:
        await db.rollback()
        raise _http_error(e) from e
    return GadgetResponse.model_validate(gadget)


@router.patch("/{gadget_id}", response_model=GadgetResponse)
async def update_gadget_endpoint(
    gadget_id: str,
    body: UpdateGadgetStatusRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GadgetResponse:
    """Set status to AVAILABLE or DEPLOYED."""
    try:
        gadget = await update_gadget_status(db, user.id, gadget_id, body.status)
        await db.commit()
    except GadgetError as e:
        raise _http_error(e) from e
    return GadgetResponse.model_validate(gadget)


@router.delete("/{gadget_id}", response_model=GadgetResponse)
async def decommission_gadget_endpoint(
    gadget_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> GadgetResponse:
    """Decommission (soft-delete) a gadget."""
    try:
        gadget = await decommission_gadget(db, user.id, gadget_id)
        await db.commit()
    except GadgetError as e:
        raise _http_error(e) from e
    return GadgetResponse.model_validate(gadget)


@router.post(
    "/{gadget_id}/self-destruct",
    response_model=SelfDestructInitiatedResponse | GadgetResponse,
)
async def self_destruct_endpoint(
    gadget_id: str,
    body: SelfDestructRequest | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SelfDestructInitiatedResponse | GadgetResponse:
    """Without a code: start the self-destruct and return the code. With a code: confirm it."""
    code = body.confirmation_code if body else None
    try:
        if code is None:
            gadget = await initiate_self_destruct(db, user.id, gadget_id)
            await db.commit()
            return SelfDestructInitiatedResponse(
                id=gadget.id,
                name=gadget.name,
                confirmation_code=gadget.confirmation_code or "",
            )
        gadget = await confirm_self_destruct(db, user.id, gadget_id, code)
        await db.commit()
    except GadgetError as e:
        raise _http_error(e) from e
    return GadgetResponse.model_validate(gadget)
