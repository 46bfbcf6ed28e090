from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CompanyCreateRequest(BaseModel):
    """Schema for creating a new company"""
    handle: str = Field(..., min_length=1, max_length=25)
    name: str = Field(..., min_length=1)
    description: str
    num_employees: Optional[int] = Field(None, ge=0)
    logo_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class CompanyUpdateRequest(BaseModel):
    """
    Schema for a partial company update.

    Only the fields present in the request are changed; `handle` is immutable.
    numEmployees and logoUrl may be set to null explicitly.
    """
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    num_employees: Optional[int] = Field(None, ge=0)
    logo_url: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may not be null")
        return v

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "forbid"


class CompanyResponse(BaseModel):
    handle: str
    name: str
    description: str
    num_employees: Optional[int] = None
    logo_url: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CompanyJob(BaseModel):
    """Job as listed under its company"""
    id: int
    title: str
    salary: Optional[int] = None
    equity: Optional[float] = None


class CompanyDetailResponse(CompanyResponse):
    jobs: List[CompanyJob] = []


class CompanyEnvelope(BaseModel):
    company: CompanyResponse


class CompanyDetailEnvelope(BaseModel):
    company: CompanyDetailResponse


class CompanyListResponse(BaseModel):
    companies: List[CompanyResponse]


class CompanyDeletedResponse(BaseModel):
    deleted: str
