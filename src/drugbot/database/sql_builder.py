"""
SQL fragment builders.

Identifiers are always composed with ``psycopg2.sql.Identifier`` and values
always travel as parameters. Names coming from HTTP requests are additionally
checked against ``SAFE_NAME_PATTERN`` before they get here.
"""

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from psycopg2 import sql

from drugbot.exceptions import InvalidNameError, InvalidRequestError

SAFE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")

ORDER_DIRECTIONS = ("asc", "desc")

OrderBy = Union[None, str, Mapping[str, str], Sequence[Tuple[str, str]]]
Search = Optional[Tuple[str, Sequence[str]]]


def is_safe_name(name: Any) -> bool:
    """Check that a table or column name only holds letters, digits and underscores."""
    return isinstance(name, str) and bool(SAFE_NAME_PATTERN.fullmatch(name))


def require_safe_name(name: Any, kind: str = "table") -> str:
    """
    Validate a table or column name.

    Args:
        name: Candidate identifier
        kind: "table" or "column", used in the error message

    Returns:
        The name, unchanged

    Raises:
        InvalidNameError: If the name is not a safe identifier
    """
    if not is_safe_name(name):
        raise InvalidNameError(f"Invalid {kind} name format")
    return name


def normalize_order_by(order_by: OrderBy) -> List[Tuple[str, str]]:
    """
    Normalize the accepted order-by shapes to a list of (column, direction).

    Accepts a bare column name, a ``{column: "asc"|"desc"}`` mapping or a
    sequence of pairs.

    Raises:
        InvalidRequestError: If an entry is not a (column, direction) pair or
            a direction is not asc/desc
    """
    if not order_by:
        return []
    if isinstance(order_by, str):
        pairs = [(order_by, "asc")]
    elif isinstance(order_by, Mapping):
        pairs = list(order_by.items())
    elif not isinstance(order_by, Sequence):
        raise InvalidRequestError("Invalid order by")
    else:
        pairs = []
        for pair in order_by:
            if isinstance(pair, (str, bytes, Mapping)) or not isinstance(pair, Sequence) or len(pair) != 2:
                raise InvalidRequestError("Order by entries must be [column, direction] pairs")
            pairs.append(tuple(pair))

    normalized = []
    for column, direction in pairs:
        direction = str(direction or "asc").lower()
        if direction not in ORDER_DIRECTIONS:
            raise InvalidRequestError("Invalid order direction")
        normalized.append((column, direction))
    return normalized


def build_columns(columns: Optional[Sequence[str]]) -> sql.Composable:
    """Column list for a SELECT, ``*`` when no columns are given."""
    if not columns:
        return sql.SQL("*")
    return sql.SQL(", ").join(sql.Identifier(c) for c in columns)


def build_where(
    where: Optional[Mapping[str, Any]] = None,
    search: Search = None,
    cast_text: bool = False,
) -> Tuple[sql.Composable, List[Any]]:
    """
    Build a WHERE clause from equality filters.

    Scalars compare with ``=``, lists/tuples/sets with ``= ANY(...)`` and None
    with ``IS NULL``. ``search`` is ``(term, columns)`` and adds a
    case-insensitive substring match OR-ed across the columns.

    Args:
        where: Column -> value filters (AND-ed together)
        search: Optional (term, columns) substring search
        cast_text: Compare columns as text (values are stringified)

    Returns:
        (clause, params); clause is empty when there is nothing to filter
    """
    conditions: List[sql.Composable] = []
    params: List[Any] = []

    for column, value in (where or {}).items():
        ident = sql.Identifier(column)
        target = sql.SQL("{}::text").format(ident) if cast_text else ident

        if value is None:
            conditions.append(sql.SQL("{} IS NULL").format(ident))
        elif isinstance(value, (list, tuple, set)):
            values = [str(v) for v in value] if cast_text else list(value)
            if cast_text:
                conditions.append(sql.SQL("{} = ANY(%s::text[])").format(target))
            else:
                conditions.append(sql.SQL("{} = ANY(%s)").format(target))
            params.append(values)
        else:
            conditions.append(sql.SQL("{} = %s").format(target))
            params.append(str(value) if cast_text else value)

    if search and search[0]:
        term, search_columns = search
        likes = [sql.SQL("{} ILIKE %s").format(sql.Identifier(c)) for c in search_columns]
        if likes:
            conditions.append(sql.SQL("(") + sql.SQL(" OR ").join(likes) + sql.SQL(")"))
            params.extend([f"%{term}%"] * len(likes))

    if not conditions:
        return sql.SQL(""), params
    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conditions), params


def build_order_by(order_by: OrderBy) -> sql.Composable:
    """ORDER BY clause, empty when there is nothing to order by."""
    pairs = normalize_order_by(order_by)
    if not pairs:
        return sql.SQL("")
    parts = [
        sql.SQL("{} {}").format(sql.Identifier(column), sql.SQL(direction.upper()))
        for column, direction in pairs
    ]
    return sql.SQL(" ORDER BY ") + sql.SQL(", ").join(parts)


def build_limit_offset(limit: Optional[int], offset: Optional[int]) -> Tuple[sql.Composable, List[Any]]:
    """LIMIT/OFFSET clause with its parameters."""
    clause = sql.SQL("")
    params: List[Any] = []
    if limit is not None:
        clause = clause + sql.SQL(" LIMIT %s")
        params.append(int(limit))
    if offset:
        clause = clause + sql.SQL(" OFFSET %s")
        params.append(int(offset))
    return clause, params


def build_assignments(values: Dict[str, Any]) -> sql.Composable:
    """``col1 = %s, col2 = %s`` for an UPDATE."""
    return sql.SQL(", ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in values
    )
