from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.database import get_db
from app.analytics import analytics_service as service
from app.users.user_models import UserRole
from app.users.user_permissions import CurrentUser, require_roles

router = APIRouter(prefix="/analytics", tags=["Analytics"])

analytics_access = require_roles(UserRole.CREATOR, message="Only creators can access analytics")


@router.get("/dashboard")
async def get_dashboard(
    creator: CurrentUser = Depends(analytics_access),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Headline numbers across all of the creator's courses
    """
    data = await service.get_dashboard(db, creator)
    return {"success": True, "data": data}


@router.get("/detailed")
async def get_detailed(
    creator: CurrentUser = Depends(analytics_access),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Per-course performance, monthly revenue and student engagement
    """
    data = await service.get_detailed(db, creator)
    return {"success": True, "data": data}
