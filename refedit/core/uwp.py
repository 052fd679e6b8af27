"""
Store app (UWP) reconciliation.

Package full names have the form
    <packageName>_<version>_<architecture>_<publisherHash>

Metadata descriptors list store packages with a neutral architecture and a
placeholder resource id ('App_1.0_neutral_~_hash'). The installed-app
registry spells the architecture out ('App_1.0_x64__hash' style), so a
descriptor name must be normalized before it is written into a UWPApp
record.
"""

from typing import NamedTuple, Optional

from .models import MetadataDescriptor

PLACEHOLDER = '~'
NEUTRAL_SEGMENT = f'_neutral_{PLACEHOLDER}_'
PLACEHOLDER_SEGMENT = f'_{PLACEHOLDER}_'
X64_MARKER = '_x64_'


class StorePackage(NamedTuple):
    full_name: str
    version: str


def split_full_name(full_name: str) -> list:
    """Split a package full name into its '_' separated fields."""
    return full_name.split('_')


def reconcile(descriptor: MetadataDescriptor,
              installed_package_name: str) -> Optional[StorePackage]:
    """Find the descriptor store package matching an installed package name.

    Returns:
        The first matching (full_name, version), or None when the
        descriptor is not a store app or nothing matches
    """
    if not descriptor.is_store_app:
        return None
    for full_name in descriptor.store_packages:
        fields = split_full_name(full_name)
        if len(fields) < 2:
            continue
        if fields[0] == installed_package_name:
            return StorePackage(full_name, fields[1])
    return None


def normalize_full_name(descriptor_full_name: str, installed_full_name: str) -> str:
    """Rewrite a descriptor full name into installed-registry form.

    x64 installs take the architecture in place of the neutral placeholder;
    anything else keeps the architecture and drops the placeholder,
    leaving the empty resource id ('__').
    """
    if X64_MARKER in installed_full_name:
        return descriptor_full_name.replace(NEUTRAL_SEGMENT, X64_MARKER)
    return descriptor_full_name.replace(PLACEHOLDER_SEGMENT, '__')
