"""Exceptions raised by refedit core operations."""


class CatalogError(Exception):
    """Base class for all catalog errors."""


class ParseError(CatalogError):
    """Raised when a catalog document is malformed and cannot be loaded."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot parse {source}: {reason}")


class NotFound(CatalogError):
    """Raised when a solution id is absent from the expected collection."""

    def __init__(self, solution_id: str, collection: str):
        self.solution_id = solution_id
        self.collection = collection
        super().__init__(f"{solution_id} not found in {collection}")


class MetadataUnavailable(CatalogError):
    """Raised when the metadata descriptor of a solution cannot be retrieved."""

    def __init__(self, solution_id: str, reason: str = ""):
        self.solution_id = solution_id
        self.reason = reason
        msg = f"Metadata unavailable for {solution_id}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class Unremovable(CatalogError):
    """Raised when a solution cannot be removed (the platform BIOS entry)."""

    def __init__(self, solution_id: str, category: str):
        self.solution_id = solution_id
        self.category = category
        super().__init__(f"{solution_id} ({category}) cannot be removed")


class CatalogUnavailable(CatalogError):
    """Raised when a reference catalog cannot be fetched."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Cannot fetch catalog {location}: {reason}")
