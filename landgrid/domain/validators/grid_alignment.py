"""Alignment checks between grids of different resolution."""

from typing import Any, Dict, Tuple

from ...abstractions.exceptions import GridMismatchError
from ...abstractions.interfaces.validator import (
    BaseValidator, ValidationResult, ValidationType, ValidationSeverity
)
from ...grid_systems import UniformGrid
from ...infrastructure.logging import get_logger

logger = get_logger(__name__)


class GridAlignmentValidator(BaseValidator):
    """
    Validates that a coarse grid nests cleanly over a fine grid.

    Checks for:
    - both grids set up
    - coarse cell size an integer multiple of the fine cell size
    - coarse origin lying on a fine cell boundary
    - coarse extent covered by the fine extent (warning only)
    """

    def __init__(self, tolerance: float = 1e-6):
        super().__init__("GridAlignmentValidator")
        self.tolerance = tolerance

    def _is_multiple(self, value: float, step: float) -> bool:
        ratio = value / step
        return abs(ratio - round(ratio)) <= self.tolerance

    def validate(self, data: Tuple[UniformGrid, UniformGrid]) -> ValidationResult:
        """
        Validate a ``(fine, coarse)`` grid pair.

        Returns:
            ValidationResult with any issues found
        """
        fine, coarse = data
        issues = []
        location = f"{fine.name}/{coarse.name}"

        for grid in (fine, coarse):
            if not grid.is_setup():
                issues.append(self.create_issue(
                    ValidationType.GRID_ALIGNMENT,
                    ValidationSeverity.ERROR,
                    f"Grid {grid.name} has not been set up",
                    location=location
                ))
        if issues:
            return self.create_result(is_valid=False, issues=issues)

        if not self._is_multiple(coarse.cell_size, fine.cell_size):
            issues.append(self.create_issue(
                ValidationType.GRID_ALIGNMENT,
                ValidationSeverity.ERROR,
                f"Cell size {coarse.cell_size} is not a multiple of {fine.cell_size}",
                location=location
            ))

        dx = coarse.project_extent.x - fine.project_extent.x
        dy = coarse.project_extent.y - fine.project_extent.y
        if not (self._is_multiple(dx, fine.cell_size) and self._is_multiple(dy, fine.cell_size)):
            issues.append(self.create_issue(
                ValidationType.GRID_ALIGNMENT,
                ValidationSeverity.ERROR,
                f"Origin offset ({dx}, {dy}) does not fall on a {fine.cell_size} m cell boundary",
                location=location,
                details={'offset': (dx, dy)}
            ))

        fine_extent = fine.project_extent.buffer(self.tolerance)
        if not fine_extent.contains_extent(coarse.project_extent):
            issues.append(self.create_issue(
                ValidationType.EXTENT_COVERAGE,
                ValidationSeverity.WARNING,
                f"{coarse.name} {coarse.project_extent.bounds} reaches beyond "
                f"{fine.name} {fine.project_extent.bounds}",
                location=location
            ))

        metadata: Dict[str, Any] = {'ratio': coarse.cell_size / fine.cell_size}
        result = self.create_result(
            is_valid=not any(issue.severity == ValidationSeverity.ERROR for issue in issues),
            issues=issues,
            metadata=metadata
        )
        for issue in result.issues:
            logger.warning(str(issue))
        return result

    def require_aligned(self, fine: UniformGrid, coarse: UniformGrid) -> int:
        """
        Raise GridMismatchError unless the grids align.

        Returns:
            Integer ratio between the cell sizes
        """
        result = self.validate((fine, coarse))
        if result.has_errors:
            raise GridMismatchError('; '.join(issue.message for issue in result.issues
                                              if issue.severity == ValidationSeverity.ERROR))
        return int(round(result.metadata['ratio']))
