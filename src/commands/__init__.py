#!/usr/bin/env python3
"""
Command endpoints for the actions reporter.

Each top-level CLI command is handled by a dedicated command class.
"""

from typing import Dict, Type
from .base import BaseCommand
from .runs import RunsCommand
from .report import ReportCommand
from .order import OrderCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'runs': RunsCommand,
    'report': ReportCommand,
    'order': OrderCommand,
}


def get_command(command_name: str, container=None) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    return COMMANDS[command_name](container)
