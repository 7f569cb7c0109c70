"""CLI command implementations for the cutoptimizer application.

This package contains subcommands for the cutoptimizer CLI, including:
- validate: Validate an optimization job file
"""

from cutoptimizer.cli.commands.validate import validate_command

__all__ = ["validate_command"]
