"""Human-readable document numbers: ``<PREFIX>-<year>-<NNN>``."""
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session


def next_document_number(db: Session, column, prefix: str, year: Optional[int] = None) -> str:
    """
    Next number in the year's sequence for ``column``.

    Takes the numeric maximum of the existing suffixes (prefix matched without
    case) and adds one. The column is unique, so two writers racing for the
    same number make the second commit fail instead of duplicating it.
    """
    year = year or date.today().year
    stem = f"{prefix}-{year}-"
    existing = db.query(column).filter(column.ilike(f"{stem}%")).all()

    highest = 0
    for (value,) in existing:
        suffix = value[len(stem):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))

    return f"{stem}{highest + 1:03d}"
