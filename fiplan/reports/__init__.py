"""Report generation for fiplan."""

from fiplan.reports.projection_summary import ProjectionSummaryGenerator

__all__ = [
    "ProjectionSummaryGenerator",
]
