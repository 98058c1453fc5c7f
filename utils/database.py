from typing import Any, Dict, Iterable, Tuple, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def row_to_dict(row: tuple, cursor) -> Dict[str, Any]:
    """
    Convert a database row tuple to a dict keyed by column name.

    Args:
        row: Database row tuple
        cursor: Database cursor with executed query

    Returns:
        Mapping of column names to row values
    """
    column_names = [desc[0] for desc in cursor.description]
    return dict(zip(column_names, row))


def row_to_model(row: tuple, model_class: type[T], column_names: list[str]) -> T:
    """
    Convert a database row tuple to a Pydantic BaseModel instance.

    Args:
        row: Database row tuple
        model_class: Pydantic BaseModel class
        column_names: List of column names in the same order as the row tuple

    Returns:
        Instance of the specified model class
    """
    row_dict = dict(zip(column_names, row))
    return model_class(**row_dict)


def row_to_model_with_cursor(row: tuple, model_class: type[T], cursor) -> T:
    """
    Convert a database row tuple to a Pydantic BaseModel instance using cursor description.

    Args:
        row: Database row tuple
        model_class: Pydantic BaseModel class
        cursor: Database cursor with executed query

    Returns:
        Instance of the specified model class
    """
    column_names = [desc[0] for desc in cursor.description]

    return row_to_model(row, model_class, column_names)


def in_clause(prefix: str, values: Iterable[Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Build a named-parameter list for an ``IN (...)`` filter.

    Works for both psycopg2 and sqlite3, unlike ``= ANY(array)``.

    Returns:
        The placeholder fragment and the params it references
    """
    params = {f"{prefix}_{i}": value for i, value in enumerate(values)}
    placeholders = ", ".join(f"%({name})s" for name in params)
    return placeholders, params
