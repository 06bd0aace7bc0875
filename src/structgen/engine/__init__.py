"""Engine module - the two entry points of the core.

Contains:
- Validation Engine: cheap structural pre-checks
- Conversion Engine: validate, parse, tag and render
"""

from structgen.engine.validation_engine import ValidationEngine, ValidationResult
from structgen.engine.conversion_engine import (
    ConversionEngine,
    ConversionError,
    ConversionResult,
    convert,
    try_convert,
    validate,
)

__all__ = [
    "ValidationEngine",
    "ValidationResult",
    "ConversionEngine",
    "ConversionError",
    "ConversionResult",
    "convert",
    "try_convert",
    "validate",
]
