# docmirror Output Module
# Rich console output

from docmirror.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
