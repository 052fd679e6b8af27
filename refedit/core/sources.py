"""
Catalog and metadata sources.

A catalog source returns the raw bytes of a platform reference file; a
metadata source returns the parsed CVA descriptor of one solution. Both
come in an HTTP flavour and a local directory flavour (mirrors, offline
use). Neither retries: a failed fetch is reported once to the caller.
"""

import configparser
import logging
import re
import urllib.error
import urllib.request
from pathlib import Path
from typing import Optional

from .. import __version__
from .compression import decompress_bytes
from .errors import CatalogUnavailable, MetadataUnavailable
from .models import MetadataDescriptor

logger = logging.getLogger(__name__)

USER_AGENT = f'refedit/{__version__}'

# SoftPaqs are published in directories of 500 ids: sp147501-148000
SOFTPAQ_RANGE = 500

STORE_SECTION = 'Store Package Info'
STORE_FLAG = 'StoreApp'
STORE_PACKAGE_PREFIX = 'storepackagename'


def http_get(url: str, timeout: int = 30) -> bytes:
    """Fetch a URL and return its body.

    Raises:
        urllib.error.URLError: On HTTP or network failure
    """
    req = urllib.request.Request(url)
    req.add_header('User-Agent', USER_AGENT)
    with urllib.request.urlopen(req, timeout=timeout) as response:
        return response.read()


def softpaq_range(solution_id: str) -> str:
    """Directory name grouping a SoftPaq id: 'sp147684' -> 'sp147501-148000'."""
    match = re.fullmatch(r'sp(\d+)', solution_id.strip().lower())
    if not match:
        raise ValueError(f"Not a SoftPaq id: {solution_id}")
    number = int(match.group(1))
    low = ((number - 1) // SOFTPAQ_RANGE) * SOFTPAQ_RANGE + 1
    return f"sp{low}-{low + SOFTPAQ_RANGE - 1}"


# =============================================================================
# CVA parsing
# =============================================================================

def _decode(data: bytes) -> str:
    try:
        return data.decode('utf-8-sig')
    except UnicodeDecodeError:
        return data.decode('latin-1')


def parse_cva(text: str, solution_id: str) -> MetadataDescriptor:
    """Parse the parts of a CVA descriptor used for reconciliation.

    Raises:
        MetadataUnavailable: If the text is not a parseable CVA file
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False, allow_no_value=True)
    try:
        parser.read_string(text)
    except configparser.Error as e:
        raise MetadataUnavailable(solution_id, f"malformed CVA: {e}") from e

    descriptor = MetadataDescriptor(solution_id=solution_id)
    descriptor.title = parser.get('Software Title', 'US', fallback='')
    descriptor.version = parser.get('General', 'Version', fallback='')

    if parser.has_section(STORE_SECTION):
        section = parser[STORE_SECTION]
        descriptor.is_store_app = (section.get(STORE_FLAG) or '0').strip() == '1'
        numbered = []
        for key, value in section.items():
            if key.startswith(STORE_PACKAGE_PREFIX) and value and value.strip():
                suffix = key[len(STORE_PACKAGE_PREFIX):]
                order = int(suffix) if suffix.isdigit() else 0
                numbered.append((order, value.strip()))
        descriptor.store_packages = [name for _, name in sorted(numbered, key=lambda item: item[0])]

    return descriptor


# =============================================================================
# Metadata sources
# =============================================================================

class MetadataSource:
    """Provides the metadata descriptor of a solution."""

    def fetch_metadata(self, solution_id: str) -> MetadataDescriptor:
        raise NotImplementedError


class HttpMetadataSource(MetadataSource):
    """Fetch CVA descriptors from a SoftPaq server."""

    def __init__(self, url_template: Optional[str] = None, timeout: int = 30):
        """
        Args:
            url_template: URL with {id} and {range} fields (default: from config)
            timeout: Connection timeout in seconds
        """
        if url_template is None:
            from .config import get_metadata_url
            url_template = get_metadata_url()
        self.url_template = url_template
        self.timeout = timeout

    def build_url(self, solution_id: str) -> str:
        fields = {'id': solution_id}
        if '{range}' in self.url_template:
            fields['range'] = softpaq_range(solution_id)
        return self.url_template.format(**fields)

    def fetch_metadata(self, solution_id: str) -> MetadataDescriptor:
        try:
            url = self.build_url(solution_id)
        except ValueError as e:
            raise MetadataUnavailable(solution_id, str(e)) from e

        logger.debug(f"Fetching metadata {url}")
        try:
            data = http_get(url, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            raise MetadataUnavailable(solution_id, f"HTTP {e.code}: {e.reason}") from e
        except urllib.error.URLError as e:
            raise MetadataUnavailable(solution_id, f"URL error: {e.reason}") from e
        except OSError as e:
            raise MetadataUnavailable(solution_id, str(e)) from e
        return parse_cva(_decode(data), solution_id)


class DirectoryMetadataSource(MetadataSource):
    """Read CVA descriptors (<id>.cva) from a local directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def fetch_metadata(self, solution_id: str) -> MetadataDescriptor:
        path = self.directory / f"{solution_id}.cva"
        try:
            data = path.read_bytes()
        except OSError as e:
            raise MetadataUnavailable(solution_id, f"cannot read {path}: {e.strerror}") from e
        return parse_cva(_decode(data), solution_id)


# =============================================================================
# Catalog sources
# =============================================================================

class CatalogSource:
    """Provides reference catalogs by platform and operating system."""

    def fetch(self, platform: str, os: str, os_version: str) -> bytes:
        raise NotImplementedError


def _catalog_fields(platform: str, os: str, os_version: str) -> dict:
    return {'platform': platform.lower(), 'os': os.lower(), 'os_version': os_version}


class HttpCatalogSource(CatalogSource):
    """Download reference catalogs from a publishing server."""

    def __init__(self, url_template: Optional[str] = None, timeout: int = 60):
        if url_template is None:
            from .config import get_catalog_url
            url_template = get_catalog_url()
        self.url_template = url_template
        self.timeout = timeout

    def build_url(self, platform: str, os: str, os_version: str) -> str:
        return self.url_template.format(**_catalog_fields(platform, os, os_version))

    def fetch(self, platform: str, os: str, os_version: str) -> bytes:
        """Fetch and decompress a reference catalog.

        Raises:
            CatalogUnavailable: On network failure or a corrupt payload
        """
        url = self.build_url(platform, os, os_version)
        logger.info(f"Fetching catalog {url}")
        try:
            data = http_get(url, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            raise CatalogUnavailable(url, f"HTTP {e.code}: {e.reason}") from e
        except urllib.error.URLError as e:
            raise CatalogUnavailable(url, f"URL error: {e.reason}") from e
        except OSError as e:
            raise CatalogUnavailable(url, str(e)) from e

        try:
            return decompress_bytes(data)
        except ValueError as e:
            raise CatalogUnavailable(url, str(e)) from e


class DirectoryCatalogSource(CatalogSource):
    """Read reference catalogs from a local mirror directory.

    Files are named <platform>_64_<os>.<os_version>.xml, optionally with a
    compression suffix.
    """

    SUFFIXES = ('', '.zst', '.gz', '.xz')

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def fetch(self, platform: str, os: str, os_version: str) -> bytes:
        fields = _catalog_fields(platform, os, os_version)
        stem = "{platform}_64_{os}.{os_version}.xml".format(**fields)
        for suffix in self.SUFFIXES:
            path = self.directory / (stem + suffix)
            if path.exists():
                try:
                    return decompress_bytes(path.read_bytes())
                except (OSError, ValueError) as e:
                    raise CatalogUnavailable(str(path), str(e)) from e
        raise CatalogUnavailable(str(self.directory / stem), "not found")
