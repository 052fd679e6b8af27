"""
Editing session over reference files.

Opening a caller-supplied catalog for the first time in a session makes a
one-time backup next to it (<file>.bak). An existing backup is never
overwritten, so the original survives repeated edits across runs.

With working copies enabled, the catalog is copied into the work directory
and all saves go there, leaving the caller's file untouched.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Set, Union

from .document import CatalogDocument

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = '.bak'


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


class CatalogSession:
    """Tracks which catalogs were opened, backed up and where they are saved."""

    def __init__(self, work_dir: Optional[Path] = None):
        """
        Args:
            work_dir: Directory for working copies (default: from config)
        """
        if work_dir is None:
            from .config import get_work_dir
            work_dir = get_work_dir()
        self.work_dir = Path(work_dir)
        self._backed_up: Set[Path] = set()

    def backup(self, path: Path) -> Optional[Path]:
        """Back up a catalog once per session.

        Returns:
            Backup path if a backup was written, None otherwise
        """
        path = path.resolve()
        if path in self._backed_up:
            return None
        self._backed_up.add(path)

        bak = backup_path(path)
        if bak.exists():
            logger.debug(f"Backup {bak} already exists, keeping it")
            return None
        shutil.copy2(path, bak)
        logger.info(f"Backed up {path} to {bak}")
        return bak

    def working_path(self, path: Path) -> Path:
        return self.work_dir / path.name

    def open(self, path: Union[str, Path], working_copy: bool = False) -> CatalogDocument:
        """Open a catalog for editing.

        Args:
            path: Caller-supplied reference file
            working_copy: Edit a copy in the work directory instead of in place

        Raises:
            ParseError: If the catalog is malformed
            OSError: If it cannot be read or copied
        """
        path = Path(path)
        doc = CatalogDocument.load(path)
        self.backup(path)

        if working_copy:
            target = self.working_path(path)
            if target.resolve() != path.resolve():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(path, target)
                logger.info(f"Editing working copy {target}")
            doc.path = target
        return doc
