"""Centralized exit codes for the docgraph CLI."""


class ExitCodes:
    """Standard exit codes for docgraph CLI commands."""

    SUCCESS = 0

    VALIDATION_ERRORS = 1

    TASK_INCOMPLETE = 3
