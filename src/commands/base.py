#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List
from argparse import Namespace

from core.container import get_container
from core.exceptions import (
    FeedbackInsightsError, FeedbackNotFoundError, NotAnalyzedError,
    ValidationError, DatabaseError
)
from core.formatters import to_json

logger = logging.getLogger(__name__)

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 4
EXIT_INVALID = 22
EXIT_UNAVAILABLE = 69
EXIT_INTERRUPTED = 130


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides access to container-managed services plus shared output and
    error handling.
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
    def database(self):
        """Get database facade from container."""
        return self._container.get('database')

    @property
    def cache_manager(self):
        return self._container.get('cache_manager')

    def create_orchestrator(self):
        """Create analysis orchestrator."""
        return self._container.get('analysis_orchestrator')

    def create_similarity_engine(self):
        return self._container.get('similarity_engine')

    def create_digest_aggregator(self):
        return self._container.get('digest_aggregator')

    def create_openai_client(self):
        """Create new OpenAI client instance."""
        return self._container.get('openai_client')

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """
        Get list of available subcommands for this command.

        Returns:
            List of subcommand names
        """
        methods = []
        for attr_name in dir(type(self)):
            if attr_name.startswith('_') or attr_name in BASE_MEMBERS:
                continue
            if callable(getattr(type(self), attr_name)):
                methods.append(attr_name)
        return methods

    def emit(self, args: Namespace, data: Any, text: str) -> None:
        """Print JSON when --json was given, otherwise the human-readable text."""
        if getattr(args, 'json', False):
            print(to_json(data))
        else:
            print(text)

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return EXIT_INTERRUPTED

        # Expected domain errors: no traceback
        if isinstance(error, FeedbackInsightsError):
            self.logger.error(error_msg)
        else:
            self.logger.error(error_msg, exc_info=True)

        if isinstance(error, (FeedbackNotFoundError, NotAnalyzedError)):
            return EXIT_NOT_FOUND
        elif isinstance(error, (ValidationError, ValueError)):
            return EXIT_INVALID
        elif isinstance(error, DatabaseError):
            return EXIT_UNAVAILABLE
        else:
            return EXIT_ERROR


BASE_MEMBERS = {name for name in dir(BaseCommand) if not name.startswith('_')}
