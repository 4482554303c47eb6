import logging

from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.database import get_db, generate_id
from app.users.auth_utils import hash_password, verify_password, create_access_token
from app.users.user_models import User
from app.users.user_permissions import CurrentUser, get_current_user
from app.users.user_schemas import (
    RegisterRequest, LoginRequest, AuthResponse, MeResponse, UserOut
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

INVALID_CREDENTIALS = "Invalid credentials"


def _user_out(user: dict) -> UserOut:
    return UserOut(
        user_id=user["user_id"],
        name=user["name"],
        email=user["email"],
        role=user["role"]
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(data: RegisterRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    email = data.email.lower()

    if await db.users.find_one({"email": email}):
        logger.info("Registration rejected: email %s already exists", email)
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        user_id=generate_id("USR"),
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        role=data.role
    )

    try:
        await db.users.insert_one(user.model_dump())
    except DuplicateKeyError:
        # Lost a race with a concurrent registration for the same email
        raise HTTPException(status_code=400, detail="User already exists")

    logger.info("User registered: %s (%s)", user.user_id, user.role)
    token = create_access_token(user.user_id, user.role)
    return AuthResponse(token=token, user=_user_out(user.model_dump()))


@router.post("/login", response_model=AuthResponse)
async def login(creds: LoginRequest, db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await db.users.find_one({"email": creds.email.lower()})

    # Same answer for unknown email and wrong password
    if not user or not verify_password(creds.password, user.get("password_hash")):
        logger.info("Login failed for %s", creds.email)
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    logger.info("User logged in: %s", user["user_id"])
    token = create_access_token(user["user_id"], user["role"])
    return AuthResponse(token=token, user=_user_out(user))


@router.get("/me", response_model=MeResponse)
async def get_me(
    current: CurrentUser = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    user = await db.users.find_one({"user_id": current.user_id}, {"_id": 0, "password_hash": 0})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return MeResponse(user=_user_out(user))


@router.post("/logout")
async def logout(current: CurrentUser = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    return {"success": True, "message": "Logged out successfully"}
