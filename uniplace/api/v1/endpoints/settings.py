"""
Portal settings endpoints (admin only).
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services import db_service


router = APIRouter(prefix="/settings", tags=["Settings"], dependencies=[Depends(get_current_admin)])


class SettingsUpdate(BaseModel):
    college_name: Optional[str] = None
    admin_email: Optional[str] = None
    placement_year: Optional[str] = None
    notify_on_application: Optional[bool] = None
    notify_on_result: Optional[bool] = None
    auto_sync_sheets: Optional[bool] = None


class SettingsResponse(SettingsUpdate):
    id: int
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


SETTINGS_NOT_FOUND = "Settings have not been initialised"


@router.get("", response_model=SettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    try:
        settings = db_service.get_settings(db)
    except UniPlaceError as e:
        raise to_http(e)
    if settings is None:
        raise HTTPException(status_code=404, detail=SETTINGS_NOT_FOUND)
    return settings


@router.put("", response_model=SettingsResponse)
def update_settings(payload: SettingsUpdate, db: Session = Depends(get_db)):
    """Overwrite the fields present in the request body."""
    try:
        settings = db_service.update_settings(db, payload.model_dump(exclude_unset=True))
    except UniPlaceError as e:
        raise to_http(e)
    if settings is None:
        raise HTTPException(status_code=404, detail=SETTINGS_NOT_FOUND)
    return settings
