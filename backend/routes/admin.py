# backend/routes/admin.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.common import ApiResponse
from schemas.dashboard import DashboardOut
from services.dashboard import get_dashboard_analytics
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/admin", tags=["Admin"])


# Store-wide counts, revenue and stock alerts (Admin only)
@router.get("/dashboard", response_model=ApiResponse[DashboardOut])
def dashboard(db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    analytics = get_dashboard_analytics(db)
    return ApiResponse(data=DashboardOut.model_validate(analytics))
