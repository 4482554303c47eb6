from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.users.auth_utils import decode_access_token, NOT_AUTHORIZED
from app.users.user_models import UserRole


@dataclass(frozen=True)
class CurrentUser:
    """
    Authenticated caller, resolved once per request and passed to handlers
    """
    user_id: str
    role: UserRole
    name: str = ""
    email: str = ""

    @property
    def is_creator(self) -> bool:
        return self.role == UserRole.CREATOR


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncIOMotorDatabase = Depends(get_db)
) -> CurrentUser:
    """
    Dependency: validates the bearer token and loads its user

    Raises:
        401: Missing, invalid or expired token, or unknown user
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    token = authorization.split(" ", 1)[1].strip()
    payload = decode_access_token(token)

    user = await db.users.find_one(
        {"user_id": payload["sub"]},
        {"_id": 0, "user_id": 1, "role": 1, "name": 1, "email": 1}
    )
    if not user:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    try:
        role = UserRole(user.get("role"))
    except ValueError:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    return CurrentUser(
        user_id=user["user_id"],
        role=role,
        name=user.get("name", ""),
        email=user.get("email", "")
    )


def require_roles(*roles: UserRole, message: str = NOT_AUTHORIZED):
    """
    Build a dependency that admits only the given roles

    Raises:
        403: Caller's role is not in the allow-list (route-specific message)
    """
    allowed = frozenset(roles)

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(status_code=403, detail=message)
        return user

    return checker


def ensure_owner(resource: dict, owner_field: str, user: CurrentUser, message: str):
    """Raise 403 unless the resource's owner field matches the caller"""
    if resource.get(owner_field) != user.user_id:
        raise HTTPException(status_code=403, detail=message)
