"""Shared fixtures: a small reference catalog and its CVA descriptors."""

from pathlib import Path

import pytest

from refedit.core.document import CatalogDocument

SAMPLE_CATALOG = """<?xml version="1.0" encoding="utf-8"?>
<ImagePal>
  <SystemInfo>
    <System>
      <SystemID>8A78</SystemID>
      <BiosVersion>01.10.00</BiosVersion>
      <BiosDate>2023-05-01</BiosDate>
      <SolutionIDRef>sp1001</SolutionIDRef>
      <OS>win11</OS>
      <OSVersion>23H2</OSVersion>
    </System>
    <SoftwareInstalled>
      <Software>
        <Name>Example Security Suite</Name>
        <Version>2.0.0</Version>
        <InstallDate>20230601</InstallDate>
        <SolutionIDRef>sp2000</SolutionIDRef>
      </Software>
    </SoftwareInstalled>
    <UWPApps>
      <UWPApp>
        <FullName>App.Example_1.200.0.0_x64__8j3eq9eme6ctt</FullName>
        <PackageName>App.Example</PackageName>
        <Version>1.200.0.0</Version>
        <SolutionIDRef>sp2000</SolutionIDRef>
      </UWPApp>
      <UWPApp>
        <FullName>App.Other_2.0.0.0_neutral__8j3eq9eme6ctt</FullName>
        <PackageName>App.Other</PackageName>
        <Version>2.0.0.0</Version>
        <SolutionIDRef>sp2000</SolutionIDRef>
      </UWPApp>
      <UWPApp>
        <FullName>App.Network_3.0.0.0_x64__abcdefghijk</FullName>
        <PackageName>App.Network</PackageName>
        <Version>3.0.0.0</Version>
        <SolutionIDRef>sp3000</SolutionIDRef>
      </UWPApp>
    </UWPApps>
  </SystemInfo>
  <Solutions>
    <UpdateInfo IdRef="sp1001">
      <Id>sp1001</Id>
      <Name>System BIOS</Name>
      <Category>BIOS</Category>
      <Version>01.10.00</Version>
      <DateReleased>2023-05-01</DateReleased>
      <Supersedes>sp0999</Supersedes>
      <Url>https://example.com/sp1001.exe</Url>
      <CvaUrl>https://example.com/sp1001.cva</CvaUrl>
    </UpdateInfo>
    <UpdateInfo IdRef="sp1000">
      <Id>sp1000</Id>
      <Name>Realtek Audio Driver</Name>
      <Category>Driver - Audio</Category>
      <Version>6.0.9500.1</Version>
      <DateReleased>2023-06-10</DateReleased>
      <Url>https://example.com/sp1000.exe</Url>
      <CvaUrl>https://example.com/sp1000.cva</CvaUrl>
    </UpdateInfo>
    <UpdateInfo IdRef="sp2000">
      <Id>sp2000</Id>
      <Name>Example Security Suite</Name>
      <Category>Software - Security</Category>
      <Version>2.0.0</Version>
      <DateReleased>2023-06-01</DateReleased>
      <Supersedes>sp1999</Supersedes>
      <Url>https://example.com/sp2000.exe</Url>
      <CvaUrl>https://example.com/sp2000.cva</CvaUrl>
    </UpdateInfo>
    <UpdateInfo IdRef="sp3000">
      <Id>sp3000</Id>
      <Name>Intel Wireless Network Driver</Name>
      <Category>Driver - Network</Category>
      <Version>23.0.0</Version>
      <DateReleased>2023-07-20</DateReleased>
      <Supersedes>sp2999</Supersedes>
      <Url>https://example.com/sp3000.exe</Url>
      <CvaUrl>https://example.com/sp3000.cva</CvaUrl>
    </UpdateInfo>
    <UpdateInfo IdRef="sp4000">
      <Id>sp4000</Id>
      <Name>USB-C Dock Firmware</Name>
      <Category>Firmware - Dock</Category>
      <Version>1.0.5</Version>
      <DateReleased>2023-04-02</DateReleased>
      <Supersedes>sp3999</Supersedes>
    </UpdateInfo>
    <UpdateInfo IdRef="sp5000">
      <Id>sp5000</Id>
      <Name>Touchpad Firmware</Name>
      <Category>Firmware</Category>
      <Version>5.1</Version>
      <DateReleased>2023-02-14</DateReleased>
    </UpdateInfo>
  </Solutions>
  <Solutions-Superseded>
    <UpdateInfo IdRef="sp0999">
      <Id>sp0999</Id>
      <Name>System BIOS</Name>
      <Category>BIOS</Category>
      <Version>01.09.00</Version>
      <DateReleased>2023-01-15</DateReleased>
    </UpdateInfo>
    <UpdateInfo IdRef="sp1999">
      <Id>sp1999</Id>
      <Name>Example Security Suite</Name>
      <Category>Software - Security</Category>
      <Version>1.9.5</Version>
      <DateReleased>2023-03-13</DateReleased>
    </UpdateInfo>
    <UpdateInfo IdRef="sp2999">
      <Id>sp2999</Id>
      <Name>Intel Wireless Network Driver</Name>
      <Category>Driver - Network</Category>
      <Version>22.5.0</Version>
      <DateReleased>2023-03-01</DateReleased>
      <Supersedes>sp2998</Supersedes>
    </UpdateInfo>
    <UpdateInfo IdRef="sp2998">
      <Id>sp2998</Id>
      <Name>Intel Wireless Network Driver</Name>
      <Category>Driver - Network</Category>
      <Version>22.0.0</Version>
      <DateReleased>2022-11-30</DateReleased>
      <Supersedes>sp2990</Supersedes>
    </UpdateInfo>
    <UpdateInfo IdRef="sp3999">
      <Id>sp3999</Id>
      <Name>USB-C Dock Firmware</Name>
      <Category>Firmware - Dock</Category>
      <Version>1.0.3</Version>
      <DateReleased>2022-12-24</DateReleased>
    </UpdateInfo>
  </Solutions-Superseded>
  <Devices>
    <Device>
      <DeviceID>ACPI\\SEC0001</DeviceID>
      <DriverVersion>2.0.0</DriverVersion>
      <DriverDate>06/01/2023</DriverDate>
      <SolutionIDRef>sp2000</SolutionIDRef>
    </Device>
    <Device>
      <DeviceID>PCI\\VEN_8086&amp;DEV_2725</DeviceID>
      <DriverVersion>23.0.0</DriverVersion>
      <DriverDate>07/20/2023</DriverDate>
      <SolutionIDRef>sp3000</SolutionIDRef>
    </Device>
    <Device>
      <DeviceID>PCI\\VEN_8086&amp;DEV_2726</DeviceID>
      <DriverVersion>23.0.0</DriverVersion>
      <DriverDate>07/20/2023</DriverDate>
      <SolutionIDRef>sp3000</SolutionIDRef>
    </Device>
    <Device>
      <DeviceID>USB\\VID_03F0&amp;PID_0488</DeviceID>
      <DriverVersion>1.0.5</DriverVersion>
      <DriverDate>04/02/2023</DriverDate>
      <SolutionIDRef>sp4000</SolutionIDRef>
    </Device>
    <Device>
      <DeviceID>HID\\SYNA0001</DeviceID>
      <DriverVersion>5.1</DriverVersion>
      <DriverDate>02/14/2023</DriverDate>
      <SolutionIDRef>sp5000</SolutionIDRef>
    </Device>
  </Devices>
</ImagePal>
"""

CVA_SP1999 = """[CVA File Information]
CVATimeStamp=20230313T101500

[General]
PN=sp1999
Version=1.9.5

[Software Title]
US=Example Security Suite

[Store Package Info]
StoreApp=1
StorePackageName1=App.Example_1.100.4628.0_neutral_~_8j3eq9eme6ctt
StorePackageName2=App.Other_1.9.0.0_neutral_~_8j3eq9eme6ctt
"""

CVA_SP2999 = """[General]
Version=22.5.0

[Software Title]
US=Intel Wireless Network Driver

[Store Package Info]
StoreApp=0
"""

CVA_SP3999 = """[General]
Version=1.0.3

[Software Title]
US=USB-C Dock Firmware

[Store Package Info]
StoreApp=1
StorePackageName1=Dock.Manager_1.0.3.0_neutral_~_v10z8vjag6ke6
"""

CVA_SP4999 = """[General]
Version=5.0

[Software Title]
US=Touchpad Firmware
"""

# Records outside the usual sections of their solution kind, plus a
# superseded firmware version
EXTRA_UWP_APPS = """      <UWPApp>
        <FullName>Dock.Manager_1.0.5.0_x64__v10z8vjag6ke6</FullName>
        <PackageName>Dock.Manager</PackageName>
        <Version>1.0.5.0</Version>
        <SolutionIDRef>sp4000</SolutionIDRef>
      </UWPApp>
"""

EXTRA_SOFTWARE = """      <Software>
        <Name>Intel PROSet Wireless</Name>
        <Version>23.0.0</Version>
        <InstallDate>20230720</InstallDate>
        <SolutionIDRef>sp3000</SolutionIDRef>
      </Software>
"""

EXTRA_SUPERSEDED = """    <UpdateInfo IdRef="sp4999">
      <Id>sp4999</Id>
      <Name>Touchpad Firmware</Name>
      <Category>Firmware</Category>
      <Version>5.0</Version>
      <DateReleased>2022-10-05</DateReleased>
    </UpdateInfo>
"""

EXTENDED_CATALOG = (
    SAMPLE_CATALOG
    .replace("    </UWPApps>", EXTRA_UWP_APPS + "    </UWPApps>")
    .replace("    </SoftwareInstalled>", EXTRA_SOFTWARE + "    </SoftwareInstalled>")
    .replace("<DateReleased>2023-02-14</DateReleased>",
             "<DateReleased>2023-02-14</DateReleased>\n      <Supersedes>sp4999</Supersedes>")
    .replace("  </Solutions-Superseded>", EXTRA_SUPERSEDED + "  </Solutions-Superseded>")
)


@pytest.fixture
def catalog_path(tmp_path) -> Path:
    path = tmp_path / "8a78_64_win11.23H2.xml"
    path.write_text(SAMPLE_CATALOG, encoding='utf-8')
    return path


@pytest.fixture
def doc(catalog_path) -> CatalogDocument:
    return CatalogDocument.load(catalog_path)


@pytest.fixture
def cva_dir(tmp_path) -> Path:
    directory = tmp_path / "cva"
    directory.mkdir()
    (directory / "sp1999.cva").write_text(CVA_SP1999, encoding='utf-8')
    (directory / "sp2999.cva").write_text(CVA_SP2999, encoding='utf-8')
    (directory / "sp3999.cva").write_text(CVA_SP3999, encoding='utf-8')
    (directory / "sp4999.cva").write_text(CVA_SP4999, encoding='utf-8')
    return directory


@pytest.fixture
def extended_doc(tmp_path) -> CatalogDocument:
    path = tmp_path / "8a78_64_win11.23H2.extended.xml"
    path.write_text(EXTENDED_CATALOG, encoding='utf-8')
    return CatalogDocument.load(path)
