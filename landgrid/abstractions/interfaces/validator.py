"""Base validator interface for grid and raster consistency checks."""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Dict
from dataclasses import dataclass
from enum import Enum


class ValidationType(Enum):
    """Types of validation checks."""
    GRID_ALIGNMENT = "grid_alignment"
    EXTENT_COVERAGE = "extent_coverage"


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Prevents the grids from being used together
    WARNING = "warning"  # Usable, but results may be degraded


@dataclass
class ValidationIssue:
    """Single validation issue found during checking."""
    validator_name: str
    validation_type: ValidationType
    severity: ValidationSeverity
    message: str
    location: Optional[str] = None  # grid name, file path, cell index
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        """String representation of the issue."""
        loc = f" at {self.location}" if self.location else ""
        return f"[{self.severity.value.upper()}] {self.validator_name}: {self.message}{loc}"


@dataclass
class ValidationResult:
    """Result of a validation check."""
    validator_name: str
    is_valid: bool
    issues: List[ValidationIssue]
    metadata: Optional[Dict[str, Any]] = None

    @property
    def error_count(self) -> int:
        """Count of error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        """Count of warning-level issues."""
        return sum(1 for issue in self.issues if issue.severity == ValidationSeverity.WARNING)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Validators check that grids and rasters fit together before they
    are wired into a landscape.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Perform validation on data.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with issues found
        """
        pass

    def create_issue(self,
                     validation_type: ValidationType,
                     severity: ValidationSeverity,
                     message: str,
                     location: Optional[str] = None,
                     details: Optional[Dict[str, Any]] = None) -> ValidationIssue:
        return ValidationIssue(
            validator_name=self.name,
            validation_type=validation_type,
            severity=severity,
            message=message,
            location=location,
            details=details
        )

    def create_result(self,
                      is_valid: bool,
                      issues: Optional[List[ValidationIssue]] = None,
                      metadata: Optional[Dict[str, Any]] = None) -> ValidationResult:
        return ValidationResult(
            validator_name=self.name,
            is_valid=is_valid,
            issues=issues or [],
            metadata=metadata
        )
