"""
Catalog document: load, query and persist a platform reference file.

Sections of a reference file:
    SystemInfo/System             - platform descriptor (BIOS identity)
    SystemInfo/SoftwareInstalled  - installed software, one per solution
    SystemInfo/UWPApps            - installed store app packages
    Solutions                     - active UpdateInfo entries
    Solutions-Superseded          - retired UpdateInfo entries
    Devices                       - devices and the solution driving them

The element tree is the single source of truth. Record objects returned by
the accessors are views on it, so every mutation goes through the tree.
"""

import logging
import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union

from .compression import compress_zstd, decompress_bytes, detect_format
from .errors import ParseError
from .models import (
    DeviceEntry, Record, SoftwareEntry, Solution, SystemDescriptor, UWPAppEntry,
)

logger = logging.getLogger(__name__)

ROOT_TAG = 'ImagePal'

SYSTEM_PATH = 'SystemInfo/System'
SOFTWARE_PATH = 'SystemInfo/SoftwareInstalled'
UWP_PATH = 'SystemInfo/UWPApps'
ACTIVE_PATH = 'Solutions'
SUPERSEDED_PATH = 'Solutions-Superseded'
DEVICES_PATH = 'Devices'

REQUIRED_SECTIONS = (ACTIVE_PATH,)

# Sections a record of a given tag may live in
_SECTIONS_BY_TAG = {
    Solution.TAG: (ACTIVE_PATH, SUPERSEDED_PATH),
    DeviceEntry.TAG: (DEVICES_PATH,),
    SoftwareEntry.TAG: (SOFTWARE_PATH,),
    UWPAppEntry.TAG: (UWP_PATH,),
}


class CatalogDocument:
    """A parsed reference file, mutated in place and saved after each change."""

    def __init__(self, root: ET.Element, path: Optional[Path] = None,
                 source_format: str = 'plain'):
        self.root = root
        self.path = path
        self.source_format = source_format

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'CatalogDocument':
        """Load a reference file, compressed or not.

        Raises:
            ParseError: If the content is not a well-formed reference file
            OSError: If the file cannot be read
        """
        path = Path(path)
        with open(path, 'rb') as f:
            raw = f.read()
        doc = cls.from_bytes(raw, source=str(path))
        doc.path = path
        logger.debug(f"Loaded {path}: {len(doc.active_solutions())} active, "
                     f"{len(doc.superseded_solutions())} superseded solutions")
        return doc

    @classmethod
    def from_bytes(cls, data: bytes, source: str = '<memory>') -> 'CatalogDocument':
        """Parse a reference file from raw (possibly compressed) bytes."""
        fmt = detect_format(data)
        try:
            data = decompress_bytes(data)
        except ValueError as e:
            raise ParseError(source, str(e)) from e

        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise ParseError(source, f"invalid XML: {e}") from e

        if root.tag != ROOT_TAG:
            raise ParseError(source, f"root element is <{root.tag}>, expected <{ROOT_TAG}>")

        for section in REQUIRED_SECTIONS:
            if root.find(section) is None:
                raise ParseError(source, f"missing <{section}> section")

        doc = cls(root, source_format=fmt)
        doc._validate(source)
        return doc

    def _validate(self, source: str):
        """Check that every solution carries an identifier."""
        seen = set()
        for path in (ACTIVE_PATH, SUPERSEDED_PATH):
            for solution in self._records(path, Solution):
                if not solution.id:
                    raise ParseError(source, f"<{Solution.TAG}> without id in <{path}>")
                if path == ACTIVE_PATH and solution.id in seen:
                    logger.warning(f"Duplicate active solution {solution.id} in {source}")
                seen.add(solution.id)

    # =========================================================================
    # Accessors
    # =========================================================================

    def _records(self, path: str, record_cls) -> list:
        section = self.root.find(path)
        if section is None:
            return []
        return [record_cls(elem) for elem in section.findall(record_cls.TAG)]

    def active_solutions(self) -> List[Solution]:
        return self._records(ACTIVE_PATH, Solution)

    def superseded_solutions(self) -> List[Solution]:
        return self._records(SUPERSEDED_PATH, Solution)

    def devices(self) -> List[DeviceEntry]:
        return self._records(DEVICES_PATH, DeviceEntry)

    def software_installed(self) -> List[SoftwareEntry]:
        return self._records(SOFTWARE_PATH, SoftwareEntry)

    def uwp_apps(self) -> List[UWPAppEntry]:
        return self._records(UWP_PATH, UWPAppEntry)

    def system(self) -> Optional[SystemDescriptor]:
        elem = self.root.find(SYSTEM_PATH)
        return SystemDescriptor(elem) if elem is not None else None

    # =========================================================================
    # Mutations
    # =========================================================================

    def _section(self, path: str, create: bool = False) -> Optional[ET.Element]:
        section = self.root.find(path)
        if section is None and create:
            parent = self.root
            for tag in path.split('/'):
                child = parent.find(tag)
                if child is None:
                    child = ET.SubElement(parent, tag)
                parent = child
            section = parent
        return section

    def remove(self, record: Record) -> bool:
        """Detach a record from whichever section holds it.

        Returns:
            True if the record was found and removed
        """
        for path in _SECTIONS_BY_TAG.get(record.element.tag, ()):
            section = self._section(path)
            if section is None:
                continue
            for child in section:
                if child is record.element:
                    section.remove(child)
                    return True
        return False

    def move_to_active(self, superseded: Solution, after: Optional[Solution] = None):
        """Move a superseded solution into the active list.

        The entry is placed right after ``after`` when given (keeps the
        listing stable across a replace), otherwise appended.
        """
        old_section = self._section(SUPERSEDED_PATH)
        if old_section is not None:
            for child in old_section:
                if child is superseded.element:
                    old_section.remove(child)
                    break

        active = self._section(ACTIVE_PATH, create=True)
        position = len(active)
        if after is not None:
            for index, child in enumerate(active):
                if child is after.element:
                    position = index + 1
                    break
        active.insert(position, superseded.element)

    # =========================================================================
    # Persistence
    # =========================================================================

    def to_bytes(self) -> bytes:
        return ET.tostring(self.root, encoding='utf-8', xml_declaration=True)

    def save(self, path: Union[str, Path, None] = None):
        """Write the whole document, replacing the target atomically.

        A crash during save leaves the previously committed file intact.

        Raises:
            OSError: If the file cannot be written
        """
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path to save the catalog to")

        data = self.to_bytes()
        if self.source_format == 'zstd':
            data = compress_zstd(data)
        elif self.source_format == 'gzip':
            import gzip
            data = gzip.compress(data)
        elif self.source_format != 'plain':
            logger.warning(f"Saving {target} uncompressed ({self.source_format} not supported for writing)")
            self.source_format = 'plain'

        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            if target.exists():
                os.chmod(tmp_name, target.stat().st_mode & 0o777)
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        if path is not None and self.path is None:
            self.path = target
        logger.debug(f"Saved {target} ({len(data)} bytes)")
