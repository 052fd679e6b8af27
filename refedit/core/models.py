"""
Record model for reference catalogs

Records are live views over the XML elements of a CatalogDocument:
reading an attribute reads the element, assigning one rewrites it. The
document tree stays the single source of truth, so no record can go stale
after a mutation.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)

# Date formats used by the different sections of a reference file
SOLUTION_DATE_FORMAT = '%Y-%m-%d'
DEVICE_DATE_FORMAT = '%m/%d/%Y'
SOFTWARE_DATE_FORMAT = '%Y%m%d'


class Kind(Enum):
    """Closed classification of a solution category label."""
    BIOS = "BIOS"
    DRIVER = "Driver"
    SOFTWARE = "Software"
    DOCK = "Dock"
    FIRMWARE = "Firmware"

    @classmethod
    def classify(cls, label: str) -> Optional['Kind']:
        """Classify a free-form category label such as 'Driver - Audio'.

        A label naming both a dock and firmware ('Firmware - Dock') is a
        dock, so its devices are cascaded exactly once.
        """
        lowered = (label or '').lower()
        for kind in _KIND_PRECEDENCE:
            if kind.value.lower() in lowered:
                return kind
        return None


_KIND_PRECEDENCE = (Kind.BIOS, Kind.DRIVER, Kind.SOFTWARE, Kind.DOCK, Kind.FIRMWARE)


def _reformat_date(value: str, fmt: str) -> str:
    value = (value or '').strip()
    try:
        return datetime.strptime(value, SOLUTION_DATE_FORMAT).strftime(fmt)
    except ValueError:
        logger.warning(f"Unexpected release date {value!r}, kept as is")
        return value


def device_date(date_released: str) -> str:
    """Convert a solution release date (YYYY-MM-DD) to a device date (MM/DD/YYYY)."""
    return _reformat_date(date_released, DEVICE_DATE_FORMAT)


def installed_date(date_released: str) -> str:
    """Convert a solution release date (YYYY-MM-DD) to an install date (YYYYMMDD)."""
    return _reformat_date(date_released, SOFTWARE_DATE_FORMAT)


class _ChildText:
    """Attribute backed by the text of a child element."""

    def __init__(self, tag: str):
        self.tag = tag

    def __get__(self, record, owner=None):
        if record is None:
            return self
        child = record.element.find(self.tag)
        if child is None or child.text is None:
            return ''
        return child.text.strip()

    def __set__(self, record, value: str):
        child = record.element.find(self.tag)
        if child is None:
            child = ET.SubElement(record.element, self.tag)
        child.text = value


class Record:
    """Base class for element-backed records."""

    TAG = ''

    def __init__(self, element: ET.Element):
        self.element = element

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented
        return self.element is other.element

    def __hash__(self):
        return id(self.element)


class Solution(Record):
    """An UpdateInfo entry, active or superseded."""

    TAG = 'UpdateInfo'

    name = _ChildText('Name')
    version = _ChildText('Version')
    category = _ChildText('Category')
    date_released = _ChildText('DateReleased')
    download_url = _ChildText('Url')
    release_notes_url = _ChildText('ReleaseNotesUrl')
    metadata_url = _ChildText('CvaUrl')
    _supersedes = _ChildText('Supersedes')
    _id = _ChildText('Id')

    @property
    def id(self) -> str:
        return self.element.get('IdRef') or self._id

    @property
    def supersedes_id(self) -> Optional[str]:
        return self._supersedes or None

    @property
    def kind(self) -> Optional[Kind]:
        return Kind.classify(self.category)

    def __repr__(self):
        return f"Solution({self.id!r}, {self.name!r}, {self.version!r})"


class DeviceEntry(Record):
    TAG = 'Device'

    device_id = _ChildText('DeviceID')
    driver_version = _ChildText('DriverVersion')
    driver_date = _ChildText('DriverDate')
    solution_ref = _ChildText('SolutionIDRef')

    def __repr__(self):
        return f"DeviceEntry({self.device_id!r} -> {self.solution_ref!r})"


class SoftwareEntry(Record):
    TAG = 'Software'

    name = _ChildText('Name')
    version = _ChildText('Version')
    installed_date = _ChildText('InstallDate')
    solution_ref = _ChildText('SolutionIDRef')

    def __repr__(self):
        return f"SoftwareEntry({self.name!r} -> {self.solution_ref!r})"


class UWPAppEntry(Record):
    TAG = 'UWPApp'

    full_name = _ChildText('FullName')
    package_name = _ChildText('PackageName')
    version = _ChildText('Version')
    solution_ref = _ChildText('SolutionIDRef')

    def __repr__(self):
        return f"UWPAppEntry({self.full_name!r} -> {self.solution_ref!r})"


class SystemDescriptor(Record):
    """The platform System block holding the BIOS identity."""

    TAG = 'System'

    system_id = _ChildText('SystemID')
    bios_version = _ChildText('BiosVersion')
    bios_date = _ChildText('BiosDate')
    solution_ref = _ChildText('SolutionIDRef')
    os = _ChildText('OS')
    os_version = _ChildText('OSVersion')


@dataclass
class MetadataDescriptor:
    """Package metadata (CVA) of a solution, as far as reconciliation needs it."""
    solution_id: str
    is_store_app: bool = False
    store_packages: List[str] = field(default_factory=list)
    title: str = ""
    version: str = ""
