"""Interfaces - pure abstractions with no implementations."""

from .landscape import IResourceUnitLocator, ITreeList, ITreeSource
from .validator import (
    BaseValidator, ValidationResult, ValidationIssue, ValidationType, ValidationSeverity
)

__all__ = [
    'IResourceUnitLocator', 'ITreeList', 'ITreeSource',
    'BaseValidator', 'ValidationResult', 'ValidationIssue',
    'ValidationType', 'ValidationSeverity',
]
