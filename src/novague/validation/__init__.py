"""Integration validation of the design artifacts."""

from __future__ import annotations

from novague.validation.validator import (
    IntegrationValidator,
    build_result,
    compute_score,
    find_cycles,
)

__all__ = [
    "IntegrationValidator",
    "build_result",
    "compute_score",
    "find_cycles",
]
