"""Core modules for refedit"""

from .document import CatalogDocument
from .errors import CatalogError, MetadataUnavailable, NotFound, ParseError, Unremovable

__all__ = [
    'CatalogDocument',
    'CatalogError',
    'MetadataUnavailable',
    'NotFound',
    'ParseError',
    'Unremovable',
]
