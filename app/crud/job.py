"""
CRUD operations for jobs.

Implements the Repository pattern over hand-written SQL; the filter and
partial-update clauses are built by app.core.sql.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import commit, execute, is_foreign_key_violation
from app.core.errors import NotFoundError, ValidationError
from app.core.sql import JOB_UPDATE_COLUMNS, Clause, check_updatable, job_filter_clause, partial_update_clause, render

logger = logging.getLogger(__name__)

JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'


def job_record(row: Mapping[str, Any]) -> Dict[str, Any]:
    # NUMERIC comes back as Decimal from PostgreSQL
    job = dict(row)
    if job.get("equity") is not None:
        job["equity"] = float(job["equity"])
    return job


def create(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a job.

    Args:
        db: Database session
        data: {title, salary, equity, companyHandle}

    Returns:
        {id, title, salary, equity, companyHandle}

    Raises:
        ValidationError: If companyHandle names no company
    """
    try:
        row = execute(
            db,
            f"""INSERT INTO jobs
                    (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {JOB_COLUMNS}""",
            [data["title"], data.get("salary"), data.get("equity"), data["companyHandle"]],
        ).mappings().one()
        commit(db)
    except IntegrityError as e:
        db.rollback()
        if is_foreign_key_violation(e):
            raise ValidationError(f"No company: {data['companyHandle']}") from e
        raise ValidationError("Invalid job data") from e

    job = job_record(row)
    logger.info(f"Created job {job['id']}: {job['title']} ({job['companyHandle']})")
    return job


def find_all(db: Session, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List jobs ordered by title, optionally filtered.

    Args:
        db: Database session
        filters: Optional {title, minSalary, hasEquity}

    Raises:
        ValidationError: If minSalary is not a number
    """
    (predicates,), values = render(job_filter_clause(filters))
    where = f"WHERE {predicates}" if predicates else ""

    result = execute(
        db,
        f"""SELECT {JOB_COLUMNS}
            FROM jobs
            {where}
            ORDER BY title, id""",
        values,
    )
    return [job_record(row) for row in result.mappings()]


def get(db: Session, job_id: int) -> Dict[str, Any]:
    """
    Retrieve a job by its ID.

    Raises:
        NotFoundError: If no such job
    """
    row = execute(
        db,
        f"""SELECT {JOB_COLUMNS}
            FROM jobs
            WHERE id = $1""",
        [job_id],
    ).mappings().first()

    if not row:
        raise NotFoundError(f"No job: {job_id}")
    return job_record(row)


def update(db: Session, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a job.

    Data can include: {title, salary, equity}. A present key set to None
    clears the column; companyHandle cannot be changed.

    Raises:
        ValidationError: If data is empty or names a field that cannot change
        NotFoundError: If no such job
    """
    check_updatable(data, JOB_UPDATE_COLUMNS)
    set_clause = partial_update_clause(data, JOB_UPDATE_COLUMNS)
    (set_cols, key), values = render(set_clause, Clause().add("id = {}", job_id))

    try:
        row = execute(
            db,
            f"""UPDATE jobs
                SET {set_cols}
                WHERE {key}
                RETURNING {JOB_COLUMNS}""",
            values,
        ).mappings().first()
        commit(db)
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Invalid job data") from e

    if not row:
        raise NotFoundError(f"No job: {job_id}")

    logger.info(f"Updated job {job_id}: {', '.join(data)}")
    return job_record(row)


def remove(db: Session, job_id: int) -> None:
    """
    Delete a job by ID.

    Raises:
        NotFoundError: If no such job
    """
    row = execute(
        db,
        """DELETE
           FROM jobs
           WHERE id = $1
           RETURNING id""",
        [job_id],
    ).first()
    commit(db)

    if not row:
        raise NotFoundError(f"No job: {job_id}")

    logger.info(f"Deleted job {job_id}")
