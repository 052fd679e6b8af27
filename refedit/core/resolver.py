"""Supersession chain resolution."""

import logging
from typing import List

from .errors import NotFound
from .indices import RecordIndex
from .models import Solution

logger = logging.getLogger(__name__)


class SupersessionResolver:
    """Walks Supersedes links from an active solution into the superseded list."""

    def __init__(self, index: RecordIndex):
        self.index = index

    def chain(self, active_id: str) -> List[Solution]:
        """Return the superseded versions of an active solution, newest first.

        The walk stops quietly at a link whose target is missing, and at a
        link pointing back into the chain.

        Raises:
            NotFound: If active_id is not an active solution
        """
        start = self.index.active_by_id.get(active_id)
        if start is None:
            raise NotFound(active_id, 'Solutions')

        chain: List[Solution] = []
        visited = {start.id}
        next_id = start.supersedes_id
        while next_id:
            if next_id in visited:
                logger.warning(f"Supersedes cycle at {next_id} from {active_id}")
                break
            node = self.index.superseded_by_id.get(next_id)
            if node is None:
                logger.debug(f"Chain of {active_id} ends at missing {next_id}")
                break
            chain.append(node)
            visited.add(next_id)
            next_id = node.supersedes_id
        return chain
