"""Validation structures and advisory checks for job files.

Schema problems are caught by the loader. This module looks at what the
schema lets through: piece records the sanitizer will drop and pieces that
can never fit on the configured sheet. Both are warnings, since the job can
still run.
"""

from dataclasses import dataclass, field
from typing import Any

from cutoptimizer.application.config.schema import OptimizationJobConfig
from cutoptimizer.domain import PieceSanitizer


@dataclass
class ValidationError:
    """A blocking validation error.

    Attributes:
        path: JSON path to the invalid field (e.g., "pieces")
        message: Human-readable description of the error
        value: The invalid value that caused the error
    """

    path: str
    message: str
    value: Any = None


@dataclass
class ValidationWarning:
    """A non-blocking validation warning.

    Attributes:
        path: JSON path to the concerning field
        message: Human-readable description of the concern
        suggestion: Optional suggested remediation
    """

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Container for validation errors and warnings."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if the job has no blocking errors."""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def exit_code(self) -> int:
        """Get the CLI exit code based on validation status.

        Returns:
            0 if valid with no warnings
            1 if there are errors
            2 if valid but has warnings
        """
        if self.errors:
            return 1
        if self.warnings:
            return 2
        return 0

    def add_error(
        self, path: str, message: str, value: Any = None
    ) -> "ValidationResult":
        """Add a validation error and return self for chaining."""
        self.errors.append(ValidationError(path=path, message=message, value=value))
        return self

    def add_warning(
        self, path: str, message: str, suggestion: str | None = None
    ) -> "ValidationResult":
        """Add a validation warning and return self for chaining."""
        self.warnings.append(
            ValidationWarning(path=path, message=message, suggestion=suggestion)
        )
        return self


def validate_config(config: OptimizationJobConfig) -> ValidationResult:
    """Run advisory checks on a loaded job file.

    Args:
        config: A job file that already passed schema validation.

    Returns:
        ValidationResult with errors and warnings.
    """
    result = ValidationResult()

    if not config.pieces:
        result.add_error("pieces", "Job has no pieces to optimize")
        return result

    sanitized = PieceSanitizer().sanitize(config.pieces)

    for dropped in sanitized.dropped:
        result.add_warning(
            f"pieces[{dropped.index}]",
            f"Record will be skipped: {dropped.reason}",
            suggestion="Use positive whole-number dimensions and a quantity of 1 to 1000",
        )

    if not sanitized.pieces:
        result.add_error("pieces", "No valid pieces remain after sanitization")
        return result

    sheet = config.sheet
    allow_rotation = config.options.allow_rotation
    for piece in sanitized.pieces:
        fits = piece.width <= sheet.width and piece.height <= sheet.height
        fits_rotated = (
            allow_rotation and piece.height <= sheet.width and piece.width <= sheet.height
        )
        if not (fits or fits_rotated):
            suggestion = None if allow_rotation else "Enable rotation or use a larger sheet"
            result.add_warning(
                "pieces",
                f"Piece '{piece.id}' ({piece.width}x{piece.height}mm) does not fit "
                f"on a {sheet.width}x{sheet.height}mm sheet",
                suggestion=suggestion,
            )

    return result
