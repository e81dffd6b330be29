# gitbulk Output Module
# Rich console output

from gitbulk.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
