"""Tests for the record model"""

import xml.etree.ElementTree as ET

from refedit.core.models import (
    DeviceEntry, Kind, Solution, device_date, installed_date,
)


class TestKind:
    """Tests for category label classification."""

    def test_plain_labels(self):
        assert Kind.classify("BIOS") == Kind.BIOS
        assert Kind.classify("Firmware") == Kind.FIRMWARE
        assert Kind.classify("Dock") == Kind.DOCK

    def test_labels_with_subcategory(self):
        assert Kind.classify("Driver - Audio") == Kind.DRIVER
        assert Kind.classify("Software - Security") == Kind.SOFTWARE

    def test_case_insensitive(self):
        assert Kind.classify("driver - network") == Kind.DRIVER

    def test_dock_firmware_is_dock(self):
        assert Kind.classify("Firmware - Dock") == Kind.DOCK

    def test_unknown(self):
        assert Kind.classify("Manageability") is None
        assert Kind.classify("") is None


class TestDates:
    """Tests for release date conversions."""

    def test_device_date(self):
        assert device_date("2023-03-13") == "03/13/2023"

    def test_installed_date(self):
        assert installed_date("2023-03-13") == "20230313"

    def test_malformed_date_kept(self):
        assert device_date("March 2023") == "March 2023"
        assert installed_date("") == ""


class TestRecords:
    """Tests for element-backed records."""

    def test_solution_fields(self):
        elem = ET.fromstring(
            '<UpdateInfo IdRef="sp42"><Name>Audio</Name><Category>Driver - Audio</Category>'
            '<Version>1.0</Version><Supersedes>sp41</Supersedes></UpdateInfo>'
        )
        solution = Solution(elem)
        assert solution.id == "sp42"
        assert solution.name == "Audio"
        assert solution.kind == Kind.DRIVER
        assert solution.supersedes_id == "sp41"
        assert solution.download_url == ""

    def test_id_from_child(self):
        solution = Solution(ET.fromstring('<UpdateInfo><Id> sp7 </Id></UpdateInfo>'))
        assert solution.id == "sp7"

    def test_no_supersedes(self):
        solution = Solution(ET.fromstring('<UpdateInfo IdRef="sp1"><Supersedes /></UpdateInfo>'))
        assert solution.supersedes_id is None

    def test_assignment_writes_element(self):
        elem = ET.fromstring('<Device><DeviceID>PCI\\X</DeviceID></Device>')
        device = DeviceEntry(elem)
        device.solution_ref = "sp9"
        device.driver_version = "2.0"
        assert elem.find('SolutionIDRef').text == "sp9"
        assert elem.find('DriverVersion').text == "2.0"

    def test_views_compare_by_element(self):
        elem = ET.fromstring('<Device />')
        assert DeviceEntry(elem) == DeviceEntry(elem)
        assert DeviceEntry(elem) != DeviceEntry(ET.fromstring('<Device />'))
