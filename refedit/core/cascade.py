"""
Cascading remove/replace of catalog solutions.

Removing or replacing a solution touches every record that references it:
devices, installed software, installed store apps, and the Solutions /
Solutions-Superseded lists themselves. Which dependent sections are touched
depends on the solution kind, see REMOVE_STEPS and REPLACE_STEPS.

Each operation runs to completion and is saved before the next one starts:

    IDLE -> VALIDATING -> CASCADING -> PERSISTED
    IDLE -> VALIDATING -> REJECTED

Everything that can reject an operation (unknown ids, BIOS removal,
metadata retrieval) is checked during VALIDATING, before the document is
touched, so a rejected operation never leaves a partial edit behind.
A save failure leaves the result in CASCADING with status SAVE_FAILED:
the edit is applied in memory and written by the next successful save.

The tables give the sections a kind normally cascades to. Rows found in
any other section still referencing the solution are swept afterwards,
so no reference outlives the solution.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .document import CatalogDocument
from .errors import MetadataUnavailable, NotFound, Unremovable
from .indices import RecordIndex
from .models import Kind, MetadataDescriptor, Solution, device_date, installed_date
from .resolver import SupersessionResolver
from .sources import MetadataSource
from .trace import NullTrace
from .uwp import normalize_full_name, reconcile

logger = logging.getLogger(__name__)


class OperationState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    CASCADING = "cascading"
    PERSISTED = "persisted"
    REJECTED = "rejected"


class Status(Enum):
    """Outcome of a cascade operation."""
    REMOVED = "removed"
    REPLACED = "replaced"
    UNREMOVABLE = "unremovable"
    NOT_FOUND = "not-found"
    METADATA_UNAVAILABLE = "metadata-unavailable"
    SAVE_FAILED = "save-failed"


class Step(Enum):
    """Dependent section updated by a cascade."""
    SOFTWARE = "software"
    UWP = "uwp_apps"
    DEVICES = "devices"


REMOVE_STEPS = {
    Kind.DRIVER: (Step.UWP, Step.DEVICES),
    Kind.SOFTWARE: (Step.SOFTWARE, Step.UWP, Step.DEVICES),
    Kind.DOCK: (Step.DEVICES,),
    Kind.FIRMWARE: (Step.DEVICES,),
}

REPLACE_STEPS = {
    Kind.DRIVER: (Step.DEVICES, Step.UWP),
    Kind.SOFTWARE: (Step.SOFTWARE, Step.UWP, Step.DEVICES),
    Kind.DOCK: (Step.UWP, Step.DEVICES),
    Kind.FIRMWARE: (Step.DEVICES,),
}

# Unclassified labels cascade everywhere so no reference is left dangling
ALL_STEPS = (Step.SOFTWARE, Step.UWP, Step.DEVICES)

# Kinds expected to have dependents; a removal without any is reported
ANOMALY_KINDS = (Kind.DRIVER, Kind.SOFTWARE)


@dataclass
class CascadeResult:
    """What an operation did, per affected section."""
    action: str
    solution_id: str
    replacement_id: Optional[str] = None
    kind: Optional[Kind] = None
    status: Optional[Status] = None
    state: OperationState = OperationState.IDLE
    counts: Dict[str, int] = field(default_factory=dict)
    anomaly: bool = False
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state == OperationState.PERSISTED

    @property
    def dependents(self) -> int:
        """Number of dependent records removed or updated."""
        return sum(self.counts.get(step.value, 0) for step in Step)

    def count(self, section: str, n: int = 1):
        self.counts[section] = self.counts.get(section, 0) + n

    def summary(self) -> str:
        """Human readable one-line description of the outcome."""
        kind = self.kind.value if self.kind else "unclassified"
        if self.status == Status.UNREMOVABLE:
            return f"{self.solution_id} ({kind}) is the platform BIOS and cannot be removed"
        if self.status == Status.SAVE_FAILED:
            return f"{self.action.capitalize()} of {self.solution_id} applied but not saved: {self.error}"
        if not self.success:
            return f"{self.action.capitalize()} of {self.solution_id} rejected: {self.error}"

        details = ", ".join(
            f"{self.counts.get(step.value, 0)} {_SECTION_LABELS[step]}"
            for step in ALL_STEPS
        )
        if self.status == Status.REPLACED:
            line = f"Replaced {self.solution_id} ({kind}) by {self.replacement_id}: {details}"
            if self.counts.get('system'):
                line += ", system BIOS updated"
        else:
            line = f"Removed {self.solution_id} ({kind}): {details}"
        if self.anomaly:
            line += " (no dependent records found)"
        return line


_SECTION_LABELS = {
    Step.SOFTWARE: "software",
    Step.UWP: "app package(s)",
    Step.DEVICES: "device(s)",
}


class CascadeEngine:
    """Applies remove/replace operations to an owned catalog document."""

    def __init__(self, document: CatalogDocument,
                 metadata_source: Optional[MetadataSource] = None,
                 trace=None, autosave: bool = True):
        """
        Args:
            document: Catalog to edit
            metadata_source: Provides CVA descriptors for replacements
            trace: Diagnostic sink (TraceLog), default discards
            autosave: Save the document after each successful operation
        """
        self.document = document
        self.metadata_source = metadata_source
        self.trace = trace or NullTrace()
        self.autosave = autosave

    # =========================================================================
    # Queries
    # =========================================================================

    def candidates(self, solution_id: str) -> List[Solution]:
        """Superseded versions an active solution can be replaced by."""
        return SupersessionResolver(RecordIndex(self.document)).chain(solution_id)

    # =========================================================================
    # Remove
    # =========================================================================

    def remove(self, solution_id: str) -> CascadeResult:
        """Remove an active solution and every record depending on it."""
        result = CascadeResult(action='remove', solution_id=solution_id)
        self.trace.event('remove_start', solution=solution_id)

        result.state = OperationState.VALIDATING
        index = RecordIndex(self.document)
        try:
            solution = self._active(index, solution_id)
            result.kind = solution.kind
            if solution.kind == Kind.BIOS:
                raise Unremovable(solution_id, solution.category)
        except NotFound as e:
            return self._reject(result, Status.NOT_FOUND, e)
        except Unremovable as e:
            return self._reject(result, Status.UNREMOVABLE, e)

        result.state = OperationState.CASCADING
        steps = self._steps(REMOVE_STEPS, solution)
        for step in steps:
            self._remove_rows(result, step, self._dependents(index, step, solution_id))
            self._trace_step(result, step)
        for step, rows in self._leftovers(index, steps, solution):
            self._remove_rows(result, step, rows)
            self._trace_step(result, step)

        self.document.remove(solution)
        result.count('solutions')

        if solution.kind in ANOMALY_KINDS and result.dependents == 0:
            result.anomaly = True
            logger.warning(f"{solution_id} ({solution.category}) had no dependent records")

        result.status = Status.REMOVED
        return self._persist(result)

    def remove_many(self, solution_ids: Iterable[str]) -> List[CascadeResult]:
        """Remove several solutions, each as its own saved operation."""
        return [self.remove(solution_id) for solution_id in solution_ids]

    # =========================================================================
    # Replace
    # =========================================================================

    def replace(self, solution_id: str, replacement_id: str) -> CascadeResult:
        """Replace an active solution by one of its superseded versions.

        Dependent records are pointed at the replacement and take its
        version and release date. The replacement moves into the active
        list at the original's position; the original is dropped.
        """
        result = CascadeResult(action='replace', solution_id=solution_id,
                               replacement_id=replacement_id)
        self.trace.event('replace_start', solution=solution_id, replacement=replacement_id)

        result.state = OperationState.VALIDATING
        index = RecordIndex(self.document)
        descriptor = None
        try:
            original = self._active(index, solution_id)
            result.kind = original.kind
            replacement = index.superseded_by_id.get(replacement_id)
            if replacement is None:
                raise NotFound(replacement_id, 'Solutions-Superseded')
            if original.kind != Kind.BIOS:
                descriptor = self._fetch_metadata(replacement_id)
        except NotFound as e:
            return self._reject(result, Status.NOT_FOUND, e)
        except MetadataUnavailable as e:
            return self._reject(result, Status.METADATA_UNAVAILABLE, e)

        result.state = OperationState.CASCADING
        if original.kind == Kind.BIOS:
            self._replace_bios(result, replacement)
            # Devices tied to the BIOS entry follow it
            steps = (Step.DEVICES,)
        else:
            steps = self._steps(REPLACE_STEPS, original)
        for step in steps:
            self._retarget_rows(result, step, self._dependents(index, step, solution_id),
                                replacement, descriptor)
            self._trace_step(result, step)
        for step, rows in self._leftovers(index, steps, original):
            self._retarget_rows(result, step, rows, replacement, descriptor)
            self._trace_step(result, step)

        self.document.move_to_active(replacement, after=original)
        result.count('superseded')
        self.document.remove(original)
        result.count('solutions')

        result.status = Status.REPLACED
        return self._persist(result)

    def _fetch_metadata(self, replacement_id: str) -> MetadataDescriptor:
        if self.metadata_source is None:
            raise MetadataUnavailable(replacement_id, "no metadata source configured")
        return self.metadata_source.fetch_metadata(replacement_id)

    def _replace_bios(self, result: CascadeResult, replacement: Solution):
        system = self.document.system()
        if system is None:
            logger.warning("Catalog has no system descriptor, BIOS identity left as is")
            return
        system.bios_version = replacement.version
        system.bios_date = replacement.date_released
        system.solution_ref = replacement.id
        result.count('system')
        self.trace.event('bios_updated', version=replacement.version,
                         date=replacement.date_released, solution=replacement.id)

    def _retarget_rows(self, result, step, rows, replacement, descriptor):
        if step == Step.SOFTWARE:
            self._replace_software(result, rows, replacement)
        elif step == Step.UWP:
            self._replace_uwp(result, rows, replacement, descriptor)
        else:
            self._replace_devices(result, rows, replacement)

    def _replace_devices(self, result, devices, replacement):
        new_date = device_date(replacement.date_released)
        for device in devices:
            device.solution_ref = replacement.id
            device.driver_version = replacement.version
            device.driver_date = new_date
            result.count(Step.DEVICES.value)

    def _replace_software(self, result, software_rows, replacement):
        new_date = installed_date(replacement.date_released)
        for software in software_rows:
            software.solution_ref = replacement.id
            software.version = replacement.version
            software.installed_date = new_date
            result.count(Step.SOFTWARE.value)

    def _replace_uwp(self, result, apps, replacement, descriptor):
        for app in apps:
            # BIOS replacements carry no descriptor
            match = reconcile(descriptor, app.package_name) if descriptor else None
            if match is not None:
                app.full_name = normalize_full_name(match.full_name, app.full_name)
                app.version = match.version
            else:
                logger.debug(f"No store package for {app.package_name} in {replacement.id}, "
                             f"using solution version")
                app.version = replacement.version
            app.solution_ref = replacement.id
            result.count(Step.UWP.value)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _active(self, index: RecordIndex, solution_id: str) -> Solution:
        solution = index.active_by_id.get(solution_id)
        if solution is None:
            raise NotFound(solution_id, 'Solutions')
        return solution

    def _steps(self, table: dict, solution: Solution) -> tuple:
        kind = solution.kind
        if kind is None:
            logger.warning(f"Unclassified category {solution.category!r} for {solution.id}, "
                           f"cascading all sections")
            return ALL_STEPS
        return table.get(kind, ())

    def _dependents(self, index: RecordIndex, step: Step, solution_id: str) -> list:
        if step == Step.SOFTWARE:
            return index.software_for(solution_id)
        if step == Step.UWP:
            return index.uwp_for(solution_id)
        return index.devices_for(solution_id)

    def _leftovers(self, index: RecordIndex, steps: tuple, solution: Solution):
        """Rows referencing the solution outside the sections its kind cascades to."""
        for step in ALL_STEPS:
            if step in steps:
                continue
            rows = self._dependents(index, step, solution.id)
            if rows:
                logger.warning(f"{len(rows)} {step.value} row(s) reference {solution.id} "
                               f"({solution.category}) outside its usual sections")
                yield step, rows

    def _remove_rows(self, result: CascadeResult, step: Step, rows: list):
        for row in rows:
            if self.document.remove(row):
                result.count(step.value)

    def _trace_step(self, result: CascadeResult, step: Step):
        self.trace.event('step', action=result.action, solution=result.solution_id,
                         section=step.value, count=result.counts.get(step.value, 0))

    def _reject(self, result: CascadeResult, status: Status, error: Exception) -> CascadeResult:
        result.state = OperationState.REJECTED
        result.status = status
        result.error = str(error)
        if status == Status.UNREMOVABLE:
            logger.info(str(error))
        else:
            logger.warning(f"{result.action} {result.solution_id}: {error}")
        self.trace.event(f'{result.action}_rejected', solution=result.solution_id,
                         status=status.value, error=result.error)
        return result

    def _persist(self, result: CascadeResult) -> CascadeResult:
        if self.autosave and self.document.path is not None:
            try:
                self.document.save()
            except OSError as e:
                result.status = Status.SAVE_FAILED
                result.error = f"cannot save {self.document.path}: {e.strerror or e}"
                logger.error(f"{result.action} {result.solution_id}: {result.error}")
                self.trace.event(f'{result.action}_save_failed', solution=result.solution_id,
                                 error=result.error)
                return result
        result.state = OperationState.PERSISTED
        logger.info(result.summary())
        self.trace.event(f'{result.action}_done', solution=result.solution_id,
                         replacement=result.replacement_id, status=result.status.value,
                         counts=result.counts, anomaly=result.anomaly)
        return result
