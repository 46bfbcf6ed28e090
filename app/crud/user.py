"""
CRUD operations for users and their job applications.

Password hashes never leave this module: every record returned omits them.
"""

import logging
from typing import Any, Dict, List, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import commit, execute, is_unique_violation
from app.core.errors import DuplicateError, NotFoundError, UnauthorizedError, ValidationError
from app.core.security import get_password_hash, verify_password
from app.core.sql import USER_UPDATE_COLUMNS, Clause, check_updatable, partial_update_clause, render

logger = logging.getLogger(__name__)

USER_COLUMNS = 'username, first_name AS "firstName", last_name AS "lastName", email, is_admin AS "isAdmin"'


def _user(row: Mapping[str, Any]) -> Dict[str, Any]:
    user = dict(row)
    # SQLite hands booleans back as 0/1
    user["isAdmin"] = bool(user["isAdmin"])
    return user


def authenticate(db: Session, username: str, password: str) -> Dict[str, Any]:
    """
    Check a username/password pair.

    Returns:
        {username, firstName, lastName, email, isAdmin}

    Raises:
        UnauthorizedError: If the user is unknown or the password is wrong
    """
    row = execute(
        db,
        f"""SELECT {USER_COLUMNS}, password
            FROM users
            WHERE username = $1""",
        [username],
    ).mappings().first()

    if row and verify_password(password, row["password"]):
        user = _user(row)
        del user["password"]
        return user

    logger.info(f"Failed login for {username}")
    raise UnauthorizedError("Invalid username/password")


def register(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Create a user with a hashed password.

    Args:
        data: {username, password, firstName, lastName, email, isAdmin}

    Raises:
        DuplicateError: If the username or email is taken
    """
    username = data["username"]
    duplicate = execute(db, "SELECT username FROM users WHERE username = $1", [username]).first()
    if duplicate:
        raise DuplicateError(f"Duplicate username: {username}")

    try:
        row = execute(
            db,
            f"""INSERT INTO users
                    (username, password, first_name, last_name, email, is_admin)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {USER_COLUMNS}""",
            [
                username,
                get_password_hash(data["password"]),
                data["firstName"],
                data["lastName"],
                data["email"],
                bool(data.get("isAdmin", False)),
            ],
        ).mappings().one()
        commit(db)
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateError(f"Duplicate email: {data['email']}") from e
        raise ValidationError("Invalid user data") from e

    logger.info(f"Registered user {username} (admin: {bool(data.get('isAdmin', False))})")
    return _user(row)


def find_all(db: Session) -> List[Dict[str, Any]]:
    """
    List users ordered by username.

    Returns:
        [{username, firstName, lastName, email, isAdmin, jobs}, ...]
        where jobs is the list of job ids applied to
    """
    users = [
        _user(row)
        for row in execute(
            db,
            f"""SELECT {USER_COLUMNS}
                FROM users
                ORDER BY username""",
        ).mappings()
    ]

    applied: Dict[str, List[int]] = {}
    for row in execute(db, "SELECT username, job_id FROM applications ORDER BY job_id").mappings():
        applied.setdefault(row["username"], []).append(row["job_id"])

    for user in users:
        user["jobs"] = applied.get(user["username"], [])
    return users


def get(db: Session, username: str) -> Dict[str, Any]:
    """
    Return a user with the ids of the jobs they applied to.

    Raises:
        NotFoundError: If no such user
    """
    row = execute(
        db,
        f"""SELECT {USER_COLUMNS}
            FROM users
            WHERE username = $1""",
        [username],
    ).mappings().first()

    if not row:
        raise NotFoundError(f"No user: {username}")

    user = _user(row)
    user["jobs"] = [
        job_id
        for (job_id,) in execute(
            db,
            "SELECT job_id FROM applications WHERE username = $1 ORDER BY job_id",
            [username],
        )
    ]
    return user


def update(db: Session, username: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Partially update a user.

    Data can include: {firstName, lastName, password, email, isAdmin}.
    A new password is hashed before it is stored.

    Raises:
        ValidationError: If data is empty or names a field that cannot change
        NotFoundError: If no such user
        DuplicateError: If the new email belongs to someone else
    """
    data = dict(data)
    if data.get("password") is not None:
        data["password"] = get_password_hash(data["password"])

    check_updatable(data, USER_UPDATE_COLUMNS)
    set_clause = partial_update_clause(data, USER_UPDATE_COLUMNS)
    (set_cols, key), values = render(set_clause, Clause().add("username = {}", username))

    try:
        row = execute(
            db,
            f"""UPDATE users
                SET {set_cols}
                WHERE {key}
                RETURNING {USER_COLUMNS}""",
            values,
        ).mappings().first()
        commit(db)
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise DuplicateError(f"Duplicate email: {data.get('email')}") from e
        raise ValidationError("Invalid user data") from e

    if not row:
        raise NotFoundError(f"No user: {username}")

    logger.info(f"Updated user {username}: {', '.join(data)}")
    return _user(row)


def remove(db: Session, username: str) -> None:
    """
    Delete a user.

    Raises:
        NotFoundError: If no such user
    """
    row = execute(
        db,
        """DELETE
           FROM users
           WHERE username = $1
           RETURNING username""",
        [username],
    ).first()
    commit(db)

    if not row:
        raise NotFoundError(f"No user: {username}")

    logger.info(f"Deleted user {username}")


def apply_to_job(db: Session, username: str, job_id: int) -> None:
    """
    Record that a user applied to a job.

    Raises:
        NotFoundError: If the job or the user does not exist
        DuplicateError: If the user already applied
    """
    if not execute(db, "SELECT id FROM jobs WHERE id = $1", [job_id]).first():
        raise NotFoundError(f"No job: {job_id}")
    if not execute(db, "SELECT username FROM users WHERE username = $1", [username]).first():
        raise NotFoundError(f"No user: {username}")

    try:
        execute(
            db,
            """INSERT INTO applications (job_id, username)
               VALUES ($1, $2)""",
            [job_id, username],
        )
        commit(db)
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError(f"{username} already applied to job {job_id}") from e

    logger.info(f"User {username} applied to job {job_id}")
