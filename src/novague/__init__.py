"""NoVague - Staged software design pipeline.

This package turns a free-form product idea into a fully specified software
architecture through ordered design stages (project analysis, UX flow, data
architecture, component architecture, integration validation), and projects
the accumulated artifacts into node/edge graphs for visualization.
"""

__version__ = "0.1.0"
