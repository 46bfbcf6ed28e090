from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import TokenUser, query_filters, require_admin
from app.crud import job as job_crud
from app.schemas.job import JobCreateRequest, JobUpdateRequest, JobEnvelope, JobListResponse, JobDeletedResponse

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", status_code=201, response_model=JobEnvelope)
def create_job(
    request: JobCreateRequest,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """
    Create a job posting for an existing company (admin only).

    Returns {job: {id, title, salary, equity, companyHandle}}
    """
    job = job_crud.create(db, request.model_dump(by_alias=True))
    return {"job": job}


@router.get("", response_model=JobListResponse)
def list_jobs(
    filters: dict = Depends(query_filters("title", "minSalary", "hasEquity")),
    db: Session = Depends(get_db),
):
    """
    List jobs ordered by title.

    Args:
        title: case-insensitive substring of the title
        minSalary: minimum salary
        hasEquity: when true, only jobs with equity > 0
    """
    return {"jobs": job_crud.find_all(db, filters)}


@router.get("/{job_id}", response_model=JobEnvelope)
def get_job(job_id: int, db: Session = Depends(get_db)):
    return {"job": job_crud.get(db, job_id)}


@router.patch("/{job_id}", response_model=JobEnvelope)
def update_job(
    job_id: int,
    request: JobUpdateRequest,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """
    Partially update a job (admin only).

    Fields can be: {title, salary, equity}; companyHandle is rejected.
    """
    job = job_crud.update(db, job_id, request.model_dump(by_alias=True, exclude_unset=True))
    return {"job": job}


@router.delete("/{job_id}", response_model=JobDeletedResponse)
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    admin: TokenUser = Depends(require_admin),
):
    """
    Delete a job by ID.
    """
    job_crud.remove(db, job_id)
    return {"deleted": job_id}
