"""Job file schema, loading and validation.

Public API:
    - OptimizationJobConfig: Root job file model
    - SheetSizeConfigSchema: Sheet dimensions model
    - OptimizationOptionsSchema: Packing options model
    - load_config: Load a job from a JSON file
    - load_config_from_dict: Load a job from a dictionary
    - ConfigError: Exception for job file errors
    - ValidationResult: Container for validation results
    - validate_config: Advisory checks on a loaded job
    - config_to_input: Convert a job into an OptimizationInput

Example:
    >>> from pathlib import Path
    >>> from cutoptimizer.application.config import load_config, ConfigError
    >>>
    >>> try:
    ...     config = load_config(Path("kitchen.json"))
    ...     print(f"Sheet: {config.sheet.width}x{config.sheet.height}")
    ... except ConfigError as e:
    ...     print(f"Error: {e}")
"""

from cutoptimizer.application.config.adapter import config_to_input
from cutoptimizer.application.config.loader import (
    ConfigError,
    load_config,
    load_config_from_dict,
)
from cutoptimizer.application.config.schema import (
    SUPPORTED_VERSIONS,
    OptimizationJobConfig,
    OptimizationOptionsSchema,
    SheetSizeConfigSchema,
)
from cutoptimizer.application.config.validator import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    validate_config,
)

__all__ = [
    "SUPPORTED_VERSIONS",
    "ConfigError",
    "OptimizationJobConfig",
    "OptimizationOptionsSchema",
    "SheetSizeConfigSchema",
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "config_to_input",
    "load_config",
    "load_config_from_dict",
    "validate_config",
]
