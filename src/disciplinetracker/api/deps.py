"""
Shared API dependencies: authentication and repository construction.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

import logging
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from disciplinetracker.config import settings
from disciplinetracker.core.database import get_db
from disciplinetracker.core.models import StaffUser
from disciplinetracker.grievances.repository import GrievanceRepository

logger = logging.getLogger(__name__)

AuthHeader = Annotated[str | None, Header(alias="Authorization")]
AuthCookie = Annotated[str | None, Cookie(alias="access_token")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def extract_token(authorization: str | None, cookie_token: str | None) -> str:
    """Pull the bearer token from the Authorization header, else the cookie."""
    if authorization:
        try:
            scheme, token = authorization.split(" ", 1)
        except ValueError:
            raise _unauthorized("Invalid Authorization header format") from None
        if scheme.lower() != "bearer":
            raise _unauthorized("Invalid auth scheme")
        return token.strip()

    if cookie_token:
        return cookie_token

    raise _unauthorized("Missing Authorization header")


def decode_actor_id(token: str) -> UUID:
    """Verify an access token and return its subject as a UUID."""
    if not settings.AUTH_JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server auth not configured",
        )

    try:
        claims = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise _unauthorized("Invalid token") from e

    try:
        return UUID(str(claims.get("sub")))
    except ValueError:
        raise _unauthorized("Invalid token subject") from None


async def get_current_actor(
    authorization: AuthHeader = None,
    access_token: AuthCookie = None,
    db: AsyncSession = Depends(get_db),
) -> StaffUser:
    """Resolve the signed-in staff member."""
    actor_id = decode_actor_id(extract_token(authorization, access_token))

    result = await db.execute(
        select(StaffUser).where(StaffUser.id == actor_id, StaffUser.is_active.is_(True))
    )
    actor = result.scalar_one_or_none()
    if actor is None:
        raise _unauthorized("Unknown staff account")

    return actor


async def get_repository(
    actor: StaffUser = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
) -> GrievanceRepository:
    """Grievance data access bound to the signed-in staff member."""
    return GrievanceRepository(db, actor.id)
