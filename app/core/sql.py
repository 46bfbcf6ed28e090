"""
Builders for the dynamic parts of repository SQL.

Fragments are collected together with the values they bind and only numbered
when rendered, so that a SET clause, a filter clause and a trailing key
lookup can be combined without the caller doing placeholder arithmetic:

    set_clause = partial_update_clause({"name": "New"}, COMPANY_UPDATE_COLUMNS)
    key_clause = Clause().add("handle = {}", "c1")
    (set_cols, where), values = render(set_clause, key_clause)
    # set_cols == '"name"=$1', where == 'handle = $2', values == ["New", "c1"]

Placeholders use the PostgreSQL positional style ($1, $2, ...); the query
executor in app.core.database binds them.
"""

from decimal import Decimal, InvalidOperation
from string import Formatter
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple

from app.core.errors import ValidationError

_formatter = Formatter()


class Clause:
    """
    Ordered list of SQL fragments, each with the values it binds.

    A fragment marks every bound value with "{}"; the markers are replaced by
    numbered placeholders in render().
    """

    def __init__(self, separator: str = " AND "):
        self.separator = separator
        self._parts: List[Tuple[str, Tuple[Any, ...]]] = []

    def add(self, fragment: str, *values: Any) -> "Clause":
        # "{{" and "}}" are literal braces, not markers
        markers = sum(1 for _, field, _, _ in _formatter.parse(fragment) if field is not None)
        if markers != len(values):
            raise ValueError(f"Fragment {fragment!r} expects {markers} values, got {len(values)}")
        self._parts.append((fragment, values))
        return self

    def __len__(self) -> int:
        return len(self._parts)

    def __bool__(self) -> bool:
        return bool(self._parts)

    def fragments(self, values: List[Any]) -> List[str]:
        """Render each fragment, appending its values to `values` as it goes."""
        rendered = []
        for fragment, bound in self._parts:
            markers = []
            for value in bound:
                values.append(value)
                markers.append(f"${len(values)}")
            rendered.append(fragment.format(*markers))
        return rendered


def render(*clauses: Clause) -> Tuple[List[str], List[Any]]:
    """
    Number the placeholders of all clauses in a single pass.

    Returns one joined string per clause (empty string for an empty clause)
    and the bound values in placeholder order.
    """
    values: List[Any] = []
    texts = [clause.separator.join(clause.fragments(values)) for clause in clauses]
    return texts, values


# Updatable fields and their storage columns. Fields not listed here cannot
# be changed through a partial update (handle, companyHandle, username).

COMPANY_UPDATE_COLUMNS: Dict[str, str] = {
    "name": "name",
    "description": "description",
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}

JOB_UPDATE_COLUMNS: Dict[str, str] = {
    "title": "title",
    "salary": "salary",
    "equity": "equity",
}

USER_UPDATE_COLUMNS: Dict[str, str] = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "password": "password",
    "isAdmin": "is_admin",
}


class PartialUpdate(NamedTuple):
    set_cols: str
    values: List[Any]


class FilterClause(NamedTuple):
    predicates: List[str]
    values: List[Any]


def partial_update_clause(data: Mapping[str, Any], js_to_sql: Optional[Mapping[str, str]] = None) -> Clause:
    """
    Build the SET assignments for a partial update.

    Field names missing from `js_to_sql` are used as column names unchanged.

    Raises:
        ValidationError: If `data` is empty
    """
    if not data:
        raise ValidationError("No data")

    js_to_sql = js_to_sql or {}
    clause = Clause(separator=", ")
    for field, value in data.items():
        column = js_to_sql.get(field, field).replace("{", "{{").replace("}", "}}")
        clause.add(f'"{column}"={{}}', value)
    return clause


def sql_for_partial_update(data: Mapping[str, Any], js_to_sql: Optional[Mapping[str, str]] = None) -> PartialUpdate:
    """
    Return the SET clause for `data` numbered from $1, and its values.

    >>> sql_for_partial_update({"firstName": "Aliya", "age": 32}, {"firstName": "first_name"})
    PartialUpdate(set_cols='"first_name"=$1, "age"=$2', values=['Aliya', 32])
    """
    (set_cols,), values = render(partial_update_clause(data, js_to_sql))
    return PartialUpdate(set_cols=set_cols, values=values)


def check_updatable(data: Mapping[str, Any], columns: Mapping[str, str]) -> None:
    """Reject fields outside an entity's updatable set."""
    unknown = [field for field in data if field not in columns]
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(unknown)}")


def _is_absent(filters: Mapping[str, Any], key: str) -> bool:
    return filters.get(key) is None


# Thresholds are bound against integer columns; keep them within BIGINT
_MIN_BIGINT = -(2 ** 63)
_MAX_BIGINT = 2 ** 63 - 1


def _parse_number(key: str, value: Any):
    """
    Convert a filter threshold to int (or float when it has a fraction).

    Integers are parsed exactly; anything non-finite, non-numeric or outside
    the BIGINT range is invalid.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be of type number")

    if isinstance(value, (int, float, Decimal)):
        number = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            number = Decimal(int(text))
        except ValueError:
            try:
                number = Decimal(text)
            except InvalidOperation:
                raise ValidationError(f"{key} must be of type number")
    else:
        raise ValidationError(f"{key} must be of type number")

    if not number.is_finite():
        raise ValidationError(f"{key} must be of type number")
    if not _MIN_BIGINT <= number <= _MAX_BIGINT:
        raise ValidationError(f"{key} is out of range")

    if number == number.to_integral_value():
        return int(number)
    return float(number)


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be of type boolean")


def _text_match(column: str) -> str:
    # ILIKE is PostgreSQL-only; LOWER() on both sides behaves the same on SQLite
    return f"LOWER({column}) LIKE LOWER({{}})"


def company_filter_clause(filters: Optional[Mapping[str, Any]] = None) -> Clause:
    """
    Build WHERE predicates for company search.

    Recognized keys: name, minEmployees, maxEmployees.

    Raises:
        ValidationError: If a threshold is not a number, or minEmployees > maxEmployees
    """
    filters = filters or {}
    min_employees = None if _is_absent(filters, "minEmployees") else _parse_number("minEmployees", filters["minEmployees"])
    max_employees = None if _is_absent(filters, "maxEmployees") else _parse_number("maxEmployees", filters["maxEmployees"])

    if min_employees is not None and max_employees is not None and min_employees > max_employees:
        raise ValidationError("minEmployees cannot be greater than the maxEmployees")

    clause = Clause()
    if not _is_absent(filters, "name"):
        clause.add(_text_match("name"), f"%{filters['name']}%")
    if min_employees is not None:
        clause.add("num_employees >= {}", min_employees)
    if max_employees is not None:
        clause.add("num_employees <= {}", max_employees)
    return clause


def job_filter_clause(filters: Optional[Mapping[str, Any]] = None) -> Clause:
    """
    Build WHERE predicates for job search.

    Recognized keys: title, minSalary, hasEquity. hasEquity=false is the same
    as leaving it out.

    Raises:
        ValidationError: If minSalary is not a number or hasEquity not a boolean
    """
    filters = filters or {}
    min_salary = None if _is_absent(filters, "minSalary") else _parse_number("minSalary", filters["minSalary"])
    has_equity = False if _is_absent(filters, "hasEquity") else _parse_bool("hasEquity", filters["hasEquity"])

    clause = Clause()
    if not _is_absent(filters, "title"):
        clause.add(_text_match("title"), f"%{filters['title']}%")
    if min_salary is not None:
        clause.add("salary >= {}", min_salary)
    if has_equity:
        clause.add("equity > 0")
    return clause


def sql_for_company_filter(filters: Optional[Mapping[str, Any]] = None) -> FilterClause:
    clause = company_filter_clause(filters)
    values: List[Any] = []
    return FilterClause(predicates=clause.fragments(values), values=values)


def sql_for_job_filter(filters: Optional[Mapping[str, Any]] = None) -> FilterClause:
    clause = job_filter_clause(filters)
    values: List[Any] = []
    return FilterClause(predicates=clause.fragments(values), values=values)
