"""
Company directory endpoints (admin only).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from uniplace.api.errors import to_http
from uniplace.core.auth import get_current_admin
from uniplace.database import get_db
from uniplace.exceptions import UniPlaceError
from uniplace.services import db_service


router = APIRouter(prefix="/companies", tags=["Companies"], dependencies=[Depends(get_current_admin)])


# ============ Schemas ============

class CompanyBase(BaseModel):
    industry: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    poc_name: Optional[str] = None
    poc_email: Optional[str] = None
    poc_phone: Optional[str] = None


class CompanyCreate(CompanyBase):
    name: str


class CompanyUpdate(CompanyBase):
    name: Optional[str] = None


class CompanyResponse(CompanyBase):
    id: int
    name: str
    total_offers: Optional[int] = 0

    class Config:
        from_attributes = True


def _get_or_404(db: Session, company_id: int):
    try:
        company = db_service.get_company(db, company_id)
    except UniPlaceError as e:
        raise to_http(e)
    if not company:
        raise HTTPException(status_code=404, detail=f"Company with ID {company_id} not found")
    return company


# ============ ENDPOINTS ============

@router.get("", response_model=list[CompanyResponse])
def list_companies(
    search: Optional[str] = Query(None, description="Company or POC name (partial match)"),
    db: Session = Depends(get_db),
):
    """List companies ordered by name."""
    try:
        return db_service.list_companies(db, search=search)
    except UniPlaceError as e:
        raise to_http(e)


@router.post("", response_model=CompanyResponse, status_code=201)
def create_company(payload: CompanyCreate, db: Session = Depends(get_db)):
    """Add a company. `name` is required."""
    if not payload.name.strip():
        raise HTTPException(status_code=400, detail="Company name is required")
    try:
        return db_service.create_company(db, payload.model_dump())
    except UniPlaceError as e:
        raise to_http(e)


@router.put("/{company_id}", response_model=CompanyResponse)
def update_company(company_id: int, payload: CompanyUpdate, db: Session = Depends(get_db)):
    """Update the fields present in the request body."""
    company = _get_or_404(db, company_id)
    data = payload.model_dump(exclude_unset=True)
    if "name" in data and not (data["name"] or "").strip():
        raise HTTPException(status_code=400, detail="Company name is required")
    try:
        return db_service.update_company(db, company, data)
    except UniPlaceError as e:
        raise to_http(e)


@router.delete("/{company_id}", status_code=204)
def delete_company(company_id: int, db: Session = Depends(get_db)):
    company = _get_or_404(db, company_id)
    try:
        db_service.delete_company(db, company)
    except UniPlaceError as e:
        raise to_http(e)
    return Response(status_code=204)
