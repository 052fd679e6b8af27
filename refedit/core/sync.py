"""
Repository sync: pre-download solution packages into a local repository.

For each requested solution, the package (Url) and its CVA descriptor
(CvaUrl) are fetched into <repository>/<solution id>/. Files already
present are not downloaded again.
"""

import logging
import socket
import time
import urllib.error
import urllib.request
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

from .document import CatalogDocument
from .indices import RecordIndex
from .models import Solution
from .sources import USER_AGENT

logger = logging.getLogger(__name__)


@dataclass
class SyncItem:
    """A file to fetch for a solution."""
    solution_id: str
    url: str

    @property
    def filename(self) -> str:
        name = Path(urlparse(self.url).path).name
        return name or f"{self.solution_id}.bin"


@dataclass
class SyncFileResult:
    """Result of fetching one file."""
    item: SyncItem
    success: bool
    path: Optional[Path] = None
    error: Optional[str] = None
    cached: bool = False


@dataclass
class SyncReport:
    """Outcome of a sync run."""
    results: List[SyncFileResult] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)

    @property
    def downloaded(self) -> int:
        return sum(1 for r in self.results if r.success and not r.cached)

    @property
    def cached(self) -> int:
        return sum(1 for r in self.results if r.cached)

    @property
    def failed(self) -> List[SyncFileResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed and not self.missing


def items_for(solution: Solution) -> List[SyncItem]:
    """Files to download for a solution: package and descriptor."""
    items = []
    for url in (solution.download_url, solution.metadata_url):
        if url:
            items.append(SyncItem(solution_id=solution.id, url=url))
    return items


class RepositorySync:
    """Download solution payloads into a local repository."""

    def __init__(self, repo_dir: Optional[Path] = None, max_workers: int = 4,
                 timeout: int = 30, max_retries: int = 3):
        """
        Args:
            repo_dir: Repository directory (default: from config)
            max_workers: Max parallel downloads
            timeout: Connection timeout in seconds
            max_retries: Attempts per file on transient network errors
        """
        if repo_dir is None:
            from .config import get_repository_dir
            repo_dir = get_repository_dir()
        self.repo_dir = Path(repo_dir)
        self.max_workers = max_workers
        self.timeout = timeout
        self.max_retries = max_retries

    def get_path(self, item: SyncItem) -> Path:
        """Structure: <repo_dir>/<solution id>/<file name>"""
        return self.repo_dir / item.solution_id / item.filename

    def is_cached(self, item: SyncItem) -> bool:
        path = self.get_path(item)
        return path.exists() and path.stat().st_size > 0

    def fetch_one(self, item: SyncItem) -> SyncFileResult:
        """Download one file, retrying transient network errors."""
        dest = self.get_path(item)
        if self.is_cached(item):
            return SyncFileResult(item=item, success=True, path=dest, cached=True)

        dest.parent.mkdir(parents=True, exist_ok=True)
        temp_path = dest.with_name(dest.name + '.part')
        last_error = None
        for attempt in range(self.max_retries):
            try:
                req = urllib.request.Request(item.url)
                req.add_header('User-Agent', USER_AGENT)
                with urllib.request.urlopen(req, timeout=self.timeout) as response:
                    with open(temp_path, 'wb') as f:
                        while True:
                            chunk = response.read(65536)
                            if not chunk:
                                break
                            f.write(chunk)
                temp_path.replace(dest)
                return SyncFileResult(item=item, success=True, path=dest)

            except urllib.error.HTTPError as e:
                # 404, 500... are not transient
                temp_path.unlink(missing_ok=True)
                return SyncFileResult(item=item, success=False,
                                      error=f"HTTP {e.code}: {e.reason}")
            except (urllib.error.URLError, socket.timeout, OSError) as e:
                temp_path.unlink(missing_ok=True)
                last_error = str(getattr(e, 'reason', e))
                if attempt < self.max_retries - 1:
                    time.sleep(1 * (attempt + 1))

        return SyncFileResult(item=item, success=False,
                              error=f"After {self.max_retries} attempts: {last_error}")

    def sync(self, document: CatalogDocument, solution_ids: Optional[Iterable[str]] = None,
             progress_callback: Callable[[SyncFileResult, int, int], None] = None) -> SyncReport:
        """Download the packages of the given solutions.

        Args:
            document: Catalog the solutions are looked up in
            solution_ids: Ids to sync (default: every active solution);
                superseded ids are accepted as well
            progress_callback: Optional callback(result, done, total)
        """
        index = RecordIndex(document)
        report = SyncReport()

        if solution_ids is None:
            solutions = index.active
        else:
            solutions = []
            for solution_id in solution_ids:
                solution = index.active_by_id.get(solution_id) or index.superseded_by_id.get(solution_id)
                if solution is None:
                    logger.warning(f"Cannot sync {solution_id}: not in catalog")
                    report.missing.append(solution_id)
                    continue
                solutions.append(solution)

        items = [item for solution in solutions for item in items_for(solution)]
        total = len(items)
        logger.info(f"Syncing {len(solutions)} solution(s), {total} file(s) into {self.repo_dir}")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.fetch_one, item): item for item in items}
            for future in as_completed(futures):
                result = future.result()
                report.results.append(result)
                if not result.success:
                    logger.warning(f"Failed {result.item.url}: {result.error}")
                if progress_callback:
                    progress_callback(result, len(report.results), total)

        return report
