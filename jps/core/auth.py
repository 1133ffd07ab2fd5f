# jps/core/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from jps.database import get_db
from jps.models.member import Member
from jps.config import settings

reusable_oauth2 = HTTPBearer()

async def get_current_member(
    db: AsyncSession = Depends(get_db),
    token: HTTPAuthorizationCredentials = Depends(reusable_oauth2)
) -> Member:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(
            token.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        member_id = payload.get("sub")
        if member_id is None:
            raise credentials_exception
        member_id = int(member_id)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(Member).where(Member.id == member_id))
    member = result.scalar_one_or_none()
    if member is None:
        raise credentials_exception
    return member


async def get_current_admin(
    current_member: Member = Depends(get_current_member)
) -> Member:
    if (current_member.role or "").lower() not in settings.admin_roles:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return current_member
