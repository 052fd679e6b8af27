"""
Lookup structures derived from a catalog document.

Catalogs hold a few hundred entries, so indices are plain O(n) scans built
fresh for each operation and dropped afterwards. They must not be reused
across a mutation.
"""

from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .document import CatalogDocument
from .models import DeviceEntry, Kind, SoftwareEntry, Solution, UWPAppEntry


def by_id(collection: Iterable[Solution], solution_id: str) -> Optional[Solution]:
    """Return the first solution with the given id, or None."""
    for solution in collection:
        if solution.id == solution_id:
            return solution
    return None


def by_category(collection: Iterable[Solution],
                predicate: Callable[[Solution], bool]) -> List[Solution]:
    """Return the solutions matching a predicate, in document order."""
    return [s for s in collection if predicate(s)]


def of_kind(*kinds: Kind) -> Callable[[Solution], bool]:
    """Predicate matching solutions of the given kinds."""
    return lambda solution: solution.kind in kinds


class RecordIndex:
    """Snapshot of a document keyed by solution id."""

    def __init__(self, document: CatalogDocument):
        self.active: List[Solution] = document.active_solutions()
        self.superseded: List[Solution] = document.superseded_solutions()

        self.active_by_id: Dict[str, Solution] = {}
        for solution in self.active:
            self.active_by_id.setdefault(solution.id, solution)

        self.superseded_by_id: Dict[str, Solution] = {}
        for solution in self.superseded:
            self.superseded_by_id.setdefault(solution.id, solution)

        self._devices: Dict[str, List[DeviceEntry]] = defaultdict(list)
        for device in document.devices():
            self._devices[device.solution_ref].append(device)

        self._software: Dict[str, List[SoftwareEntry]] = defaultdict(list)
        for software in document.software_installed():
            self._software[software.solution_ref].append(software)

        self._uwp: Dict[str, List[UWPAppEntry]] = defaultdict(list)
        for app in document.uwp_apps():
            self._uwp[app.solution_ref].append(app)

    def devices_for(self, solution_id: str) -> Sequence[DeviceEntry]:
        return self._devices.get(solution_id, [])

    def software_for(self, solution_id: str) -> Sequence[SoftwareEntry]:
        return self._software.get(solution_id, [])

    def uwp_for(self, solution_id: str) -> Sequence[UWPAppEntry]:
        return self._uwp.get(solution_id, [])

    def referenced_ids(self) -> set:
        """All solution ids referenced by dependent records."""
        return set(self._devices) | set(self._software) | set(self._uwp)
