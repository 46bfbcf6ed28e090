"""
CRUD operations for companies.

Statements are written by hand; the SET and WHERE parts that depend on the
caller's input come from app.core.sql.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import commit, execute, is_unique_violation
from app.core.errors import DuplicateError, NotFoundError, ValidationError
from app.crud.job import job_record
from app.core.sql import COMPANY_UPDATE_COLUMNS, Clause, check_updatable, company_filter_clause, partial_update_clause, render

logger = logging.getLogger(__name__)

COMPANY_COLUMNS = 'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'


def create(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a company.

    Args:
        db: Database session
        data: {handle, name, description, numEmployees, logoUrl}

    Returns:
        {handle, name, description, numEmployees, logoUrl}

    Raises:
        DuplicateError: If a company with the same handle exists
    """
    handle = data["handle"]
    duplicate = execute(db, "SELECT handle FROM companies WHERE handle = $1", [handle]).first()
    if duplicate:
        raise DuplicateError(f"Duplicate company: {handle}")

    try:
        result = execute(
            db,
            f"""INSERT INTO companies
                    (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMPANY_COLUMNS}""",
            [handle, data["name"], data["description"], data.get("numEmployees"), data.get("logoUrl")],
        )
        company = dict(result.mappings().one())
        commit(db)
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            # Lost a race on the handle, or the name is already taken
            raise DuplicateError(f"Duplicate company: {handle}") from e
        raise ValidationError("Invalid company data") from e

    logger.info(f"Created company {handle}")
    return company


def find_all(db: Session, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    List companies ordered by name, optionally filtered.

    Args:
        db: Database session
        filters: Optional {name, minEmployees, maxEmployees}

    Raises:
        ValidationError: For non-numeric thresholds or minEmployees > maxEmployees
    """
    (predicates,), values = render(company_filter_clause(filters))
    where = f"WHERE {predicates}" if predicates else ""

    result = execute(
        db,
        f"""SELECT {COMPANY_COLUMNS}
            FROM companies
            {where}
            ORDER BY name""",
        values,
    )
    return [dict(row) for row in result.mappings()]


def get(db: Session, handle: str) -> Dict[str, Any]:
    """
    Return a company with its jobs.

    Returns:
        {handle, name, description, numEmployees, logoUrl, jobs}
        where jobs is [{id, title, salary, equity}, ...] ordered by id

    Raises:
        NotFoundError: If no such company
    """
    row = execute(
        db,
        f"""SELECT {COMPANY_COLUMNS}
            FROM companies
            WHERE handle = $1""",
        [handle],
    ).mappings().first()

    if not row:
        raise NotFoundError(f"No company: {handle}")

    jobs = execute(
        db,
        """SELECT id, title, salary, equity
           FROM jobs
           WHERE company_handle = $1
           ORDER BY id""",
        [handle],
    ).mappings()

    company = dict(row)
    company["jobs"] = [job_record(job) for job in jobs]
    return company


def update(db: Session, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a company; only the given fields change.

    Data can include: {name, description, numEmployees, logoUrl}

    Raises:
        ValidationError: If data is empty or names a field that cannot change
        NotFoundError: If no such company
    """
    check_updatable(data, COMPANY_UPDATE_COLUMNS)
    set_clause = partial_update_clause(data, COMPANY_UPDATE_COLUMNS)
    (set_cols, key), values = render(set_clause, Clause().add("handle = {}", handle))

    try:
        row = execute(
            db,
            f"""UPDATE companies
                SET {set_cols}
                WHERE {key}
                RETURNING {COMPANY_COLUMNS}""",
            values,
        ).mappings().first()
        commit(db)
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateError(f"Duplicate company name: {data.get('name')}") from e
        raise ValidationError("Invalid company data") from e

    if not row:
        raise NotFoundError(f"No company: {handle}")

    logger.info(f"Updated company {handle}: {', '.join(data)}")
    return dict(row)


def remove(db: Session, handle: str) -> None:
    """
    Delete a company (its jobs go with it).

    Raises:
        NotFoundError: If no such company
    """
    row = execute(
        db,
        """DELETE
           FROM companies
           WHERE handle = $1
           RETURNING handle""",
        [handle],
    ).first()
    commit(db)

    if not row:
        raise NotFoundError(f"No company: {handle}")

    logger.info(f"Deleted company {handle}")