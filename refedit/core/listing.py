"""Filtered listing of active solutions for display."""

from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional

from .models import Solution


@dataclass
class DisplayRow:
    """One listed solution."""
    id: str
    name: str
    version: str
    category: str
    date_released: str
    matched: str = ""

    def label(self) -> str:
        return f"{self.id} - {self.name} [{self.version}] ({self.category}, {self.date_released})"

    def to_dict(self) -> dict:
        return asdict(self)


def match_category(category: str, tokens: Iterable[str]) -> Optional[str]:
    """Return the first token contained in a category label (case-insensitive)."""
    lowered = (category or '').lower()
    for token in tokens:
        if token and token.lower() in lowered:
            return token
    return None


def list_rows(solutions: Iterable[Solution], categories: Iterable[str] = (),
              name_filter: Optional[str] = None) -> List[DisplayRow]:
    """Build display rows for the solutions matching the filters.

    Args:
        solutions: Active solutions, in document order
        categories: Category tokens ('driver', 'bios', ...); empty lists all
        name_filter: Substring the solution name must contain

    Returns:
        One row per matching solution, document order preserved
    """
    tokens = [t for t in categories if t]
    needle = name_filter.lower() if name_filter else None

    rows = []
    for solution in solutions:
        matched = ""
        if tokens:
            matched = match_category(solution.category, tokens)
            if matched is None:
                continue
        if needle and needle not in solution.name.lower():
            continue
        rows.append(DisplayRow(
            id=solution.id,
            name=solution.name,
            version=solution.version,
            category=solution.category,
            date_released=solution.date_released,
            matched=matched,
        ))
    return rows
