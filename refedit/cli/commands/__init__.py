"""CLI command modules."""

from .catalog import (
    cmd_chain,
    cmd_fetch,
    cmd_list,
)
from .edit import (
    cmd_remove,
    cmd_replace,
)
from .sync import (
    cmd_sync,
)

__all__ = [
    'cmd_chain',
    'cmd_fetch',
    'cmd_list',
    'cmd_remove',
    'cmd_replace',
    'cmd_sync',
]
