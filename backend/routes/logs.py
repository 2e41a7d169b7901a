# backend/routes/logs.py
import math
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.log import Log
from models.users import User
from schemas.common import ApiResponse, Pagination
from schemas.dashboard import LogResponse
from utils.errors import ValidationError
from utils.tokenJWT import admin_required

router = APIRouter(prefix="/logs", tags=["Logs"])


def _parse_date(value: str, end_of_day: bool = False) -> datetime:
    # Bare dates cover the whole day when used as an upper bound
    if end_of_day and len(value) == 10:
        value += " 23:59:59"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid date: {value}. Expected YYYY-MM-DD.")


@router.get("", response_model=ApiResponse[List[LogResponse]])
def get_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, alias="userId", description="Filter by user id"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    status: Optional[str] = Query(None, description="SUCCESS or FAIL"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))
    if user_id is not None:
        query = query.filter(Log.user_id == user_id)
    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))
    if status:
        query = query.filter(Log.status == status)
    if date_from:
        query = query.filter(Log.ts >= _parse_date(date_from))
    if date_to:
        query = query.filter(Log.ts <= _parse_date(date_to, end_of_day=True))

    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * limit).limit(limit).all()

    return ApiResponse(
        data=[LogResponse.model_validate(entry) for entry in logs],
        pagination=Pagination(total=total, page=page, pages=max(1, math.ceil(total / limit)), limit=limit),
    )
