"""
GridPoint Custom Exception Classes

This module defines all custom exception classes for better error handling
and more informative error messages.
"""

from typing import Optional, Sequence, Any
from pathlib import Path

# ============================================================================
# Base Exception
# ============================================================================

class GridPointError(Exception):
    """Base exception class for all GridPoint related errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        full_message = f"{message}\nDetails: {details}" if details else message
        super().__init__(full_message)

# ============================================================================
# Geometry Errors
# ============================================================================

class GeometryMismatch(GridPointError):
    """Coordinate reference systems that cannot be reconciled."""

    def __init__(self, source_crs: Optional[str], target_crs: Optional[str], reason: str):
        super().__init__(
            f"Cannot reconcile CRS {source_crs!r} with {target_crs!r}",
            reason
        )
        self.source_crs = source_crs
        self.target_crs = target_crs

# ============================================================================
# Temporal Errors
# ============================================================================

class MissingTimeDimension(GridPointError):
    """Temporal operation requested on layers lacking timestamps."""

    def __init__(self, operation: str, layers: Sequence[str]):
        layers_str = ", ".join(str(name) for name in layers)
        super().__init__(
            f"Temporal operation '{operation}' requires timestamps on every layer",
            f"Layers without timestamps: {layers_str}"
        )
        self.operation = operation
        self.layers = list(layers)

# ============================================================================
# Join Errors
# ============================================================================

class UnjoinableRecord(GridPointError):
    """Strict merge requested but point identifiers have no attribute row."""

    def __init__(self, missing_ids: Sequence[Any], id_field: str):
        ids_str = ", ".join(str(pid) for pid in missing_ids)
        super().__init__(
            f"No attribute row for {len(missing_ids)} point(s) on '{id_field}'",
            f"Unmatched identifiers: {ids_str}"
        )
        self.missing_ids = list(missing_ids)
        self.id_field = id_field

# ============================================================================
# Data Format and Availability Errors
# ============================================================================

class RasterFormatError(GridPointError):
    """Input cannot be interpreted as a regular raster grid."""

    def __init__(self, item: str, issue: str):
        super().__init__(f"Invalid raster input '{item}': {issue}")
        self.item = item
        self.issue = issue

class RequiredFileNotFoundError(GridPointError):
    """Required file not found."""

    def __init__(self, file_path: Path, file_type: str):
        super().__init__(f"{file_type} file not found: {file_path}")
        self.file_path = file_path
        self.file_type = file_type

class VariableNotFoundError(GridPointError):
    """Variables not found."""

    def __init__(self, missing_variables: Sequence[str], available_variables: Optional[Sequence[str]] = None):
        vars_str = ", ".join(missing_variables)
        super().__init__(
            f"Variables not found: {vars_str}",
            f"Available variables: {', '.join(sorted(available_variables))}" if available_variables else None
        )
        self.missing_variables = list(missing_variables)
        self.available_variables = list(available_variables) if available_variables else None

# ============================================================================
# Processing Errors
# ============================================================================

class DataProcessingError(GridPointError):
    """Data processing related errors."""

    def __init__(self, operation: str, reason: str):
        super().__init__(f"Data processing failed during {operation}", reason)
        self.operation = operation

class ParameterError(GridPointError):
    """Parameter validation errors."""

    def __init__(self, parameter: str, value: str, reason: str):
        super().__init__(f"Invalid parameter '{parameter}': {value}", reason)
        self.parameter = parameter
        self.value = value

# ============================================================================
# Utility Functions
# ============================================================================

def validate_required_file(file_path: Path, file_type: str) -> Path:
    """
    Validate that a required file exists.

    Args:
        file_path: Path to the file
        file_type: Type description of the file

    Returns:
        Path: The validated file path

    Raises:
        RequiredFileNotFoundError: If file doesn't exist
    """
    if not file_path.is_file():
        raise RequiredFileNotFoundError(file_path, file_type)
    return file_path

def check_variables_availability(requested: Sequence[str], available: Sequence[str]) -> None:
    """Check if all requested variables are available."""
    missing = [v for v in requested if v not in available]
    if missing:
        raise VariableNotFoundError(missing, available)
