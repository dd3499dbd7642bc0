from __future__ import annotations

from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session


def update_where(
    session: Session,
    orm_type: type[Any],
    row_id: str,
    conditions: list[Any],
    values: dict[str, Any],
) -> bool:
    """Single-row ``UPDATE ... WHERE id = ? AND <conditions>``.

    Returns True when exactly one row matched. Callers decide what a miss
    means (missing row versus a precondition that no longer holds). The
    identity map is not synchronized; callers commit or roll back right after.
    """
    stmt = (
        update(orm_type)
        .where(orm_type.id == row_id, *conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    return result.rowcount == 1


__all__ = ["update_where"]
