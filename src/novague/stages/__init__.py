"""Stage contracts of the design pipeline."""

from __future__ import annotations

from novague.stages.contracts import (
    StageContext,
    analyze_idea,
    build_validator,
    design_components,
    design_data,
    design_ux,
    run_stage,
    validate_integration,
)

__all__ = [
    "StageContext",
    "analyze_idea",
    "build_validator",
    "design_components",
    "design_data",
    "design_ux",
    "run_stage",
    "validate_integration",
]
