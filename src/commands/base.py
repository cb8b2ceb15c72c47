#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import List, Optional

from core.container import get_container
from core.exceptions import (
    ActionsReporterError,
    ImportParseError,
    InputValidationError,
    RemoteApiError,
    StorageError,
    StorageParseError,
)
from core.report import Report, build_report


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides access to configuration and storage through the container, plus
    shared report building and error handling.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def run_store(self):
        """Get run store from container."""
        return self._container.get('run_store')

    @property
    def global_order(self):
        """Get workflow order from container."""
        return self._container.get('global_order')

    def build_report(self, exclude_short_runs: bool = False) -> Report:
        """Build the two-section report over all stored runs."""
        return build_report(
            self.run_store.load(),
            self.global_order,
            exclude_short_runs=exclude_short_runs,
            short_run_ratio=self.config.app.short_run_ratio,
            main_branch=self.config.app.main_branch
        )

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """Public methods other than the base class helpers."""
        methods = []
        for attr_name in dir(type(self)):
            if not attr_name.startswith('_') and callable(getattr(type(self), attr_name)):
                if attr_name not in ['execute', 'get_available_subcommands', 'handle_error', 'build_report',
                                     'unknown_subcommand']:
                    methods.append(attr_name)
        return methods

    def unknown_subcommand(self, subcommand: Optional[str]) -> int:
        available = ", ".join(self.get_available_subcommands())
        self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
        return 1

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Known application errors are reported without a traceback.

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)
        if isinstance(error, ActionsReporterError):
            self.logger.error(error_msg)
            self.logger.debug(f"Error details: {error.to_dict()}")
        else:
            self.logger.error(error_msg, exc_info=True)

        if isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, (InputValidationError, ImportParseError, ValueError)):
            return 22
        elif isinstance(error, RemoteApiError):
            return 69
        elif isinstance(error, (StorageError, StorageParseError)):
            return 74
        else:
            return 1
