"""Onboarding and user location endpoints.

There is no authentication: the user id returned by onboarding is the only
credential and ownership checks compare it verbatim.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User, utcnow
from app.schemas.user import (
    NicknameAvailabilityResponse,
    OnboardRequest,
    OnboardResponse,
    UpdateLocationRequest,
    UpdateLocationResponse,
)
from app.services.region_resolver import KakaoRegionResolver, get_region_resolver
from app.utils.audit import log_audit_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

_NICKNAME_TAKEN = "Nickname already exists. Please choose another."


async def _nickname_exists(db: AsyncSession, nickname: str) -> bool:
    result = await db.execute(select(User.id).where(User.nickname == nickname))
    return result.scalar_one_or_none() is not None


@router.post("/onboard", response_model=OnboardResponse, status_code=status.HTTP_201_CREATED)
async def onboard_user(
    data: OnboardRequest,
    db: AsyncSession = Depends(get_db),
    resolver: KakaoRegionResolver = Depends(get_region_resolver),
):
    """Create a user with a unique nickname at the given location."""
    if await _nickname_exists(db, data.nickname):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_NICKNAME_TAKEN)

    admin_dong = await resolver.resolve_admin_dong(data.lon, data.lat)

    user = User(
        nickname=data.nickname,
        lat=data.lat,
        lon=data.lon,
        admin_dong=admin_dong.value,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        # Only a concurrent onboarding of the same nickname is a conflict
        if await _nickname_exists(db, data.nickname):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=_NICKNAME_TAKEN)
        raise
    await db.refresh(user)

    log_audit_event(
        "user_onboarded",
        actor_id=user.id,
        details={"nickname": user.nickname, "admin_dong": user.admin_dong},
    )

    return OnboardResponse(
        user_id=user.id,
        nickname=user.nickname,
        lat=user.lat,
        lon=user.lon,
        admin_dong=user.admin_dong,
    )


@router.post("/update-location", response_model=UpdateLocationResponse)
async def update_user_location(
    data: UpdateLocationRequest,
    db: AsyncSession = Depends(get_db),
    resolver: KakaoRegionResolver = Depends(get_region_resolver),
):
    """Move a user and re-resolve their administrative dong."""
    result = await db.execute(select(User).where(User.id == data.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    admin_dong = await resolver.resolve_admin_dong(data.lon, data.lat)

    user.lat = data.lat
    user.lon = data.lon
    user.admin_dong = admin_dong.value
    user.last_active_at = utcnow()
    await db.commit()

    logger.info(f"User {user.id} moved to {user.admin_dong}")
    return UpdateLocationResponse(admin_dong=user.admin_dong)


@router.get("/check-nickname", response_model=NicknameAvailabilityResponse)
async def check_nickname_availability(
    nickname: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Report whether a nickname is still free."""
    taken = await _nickname_exists(db, nickname)
    return NicknameAvailabilityResponse(nickname=nickname, is_available=not taken)
