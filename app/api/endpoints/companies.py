"""
Company endpoints.

Anyone can list and read companies; creating, updating and deleting
require an admin token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import TokenUser, query_filters, require_admin
from app.crud import company as company_crud
from app.schemas.company import (
    CompanyCreateRequest,
    CompanyUpdateRequest,
    CompanyEnvelope,
    CompanyDetailEnvelope,
    CompanyListResponse,
    CompanyDeletedResponse,
)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post("", status_code=201, response_model=CompanyEnvelope)
def create_company(
    request: CompanyCreateRequest,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """Create a company. Returns {company: {handle, name, description, numEmployees, logoUrl}}"""
    company = company_crud.create(db, request.model_dump(by_alias=True))
    return {"company": company}


@router.get("", response_model=CompanyListResponse)
def list_companies(
    filters: dict = Depends(query_filters("name", "minEmployees", "maxEmployees")),
    db: Session = Depends(get_db),
):
    """
    List companies ordered by name.

    Optional filters:
    - name: case-insensitive substring of the company name
    - minEmployees / maxEmployees: inclusive bounds on numEmployees
    """
    return {"companies": company_crud.find_all(db, filters)}


@router.get("/{handle}", response_model=CompanyDetailEnvelope)
def get_company(handle: str, db: Session = Depends(get_db)):
    """Company details including its jobs."""
    return {"company": company_crud.get(db, handle)}


@router.patch("/{handle}", response_model=CompanyEnvelope)
def update_company(
    handle: str,
    request: CompanyUpdateRequest,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """
    Partially update a company.

    Fields can be: {name, description, numEmployees, logoUrl}
    """
    company = company_crud.update(db, handle, request.model_dump(by_alias=True, exclude_unset=True))
    return {"company": company}


@router.delete("/{handle}", response_model=CompanyDeletedResponse)
def delete_company(
    handle: str,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    company_crud.remove(db, handle)
    return {"deleted": handle}
