"""
View module for schemadoc.

Projects resolved schema trees into the three documentation views:
- model: structural skeleton with kind names at the leaves
- example_model: the same shape filled with example values
- metadata: flat field path to description/required/constraints

Invariants:
    - Rendering never mutates a schema tree
    - Each projection can be computed on its own
"""

from .renderer import (
    EXAMPLE_MODEL_KEY,
    METADATA_KEY,
    MODEL_KEY,
    build_metadata,
    render,
    render_example,
    render_model,
    render_request,
    render_response,
)

__all__ = [
    "MODEL_KEY",
    "EXAMPLE_MODEL_KEY",
    "METADATA_KEY",
    "render",
    "render_request",
    "render_response",
    "render_model",
    "render_example",
    "build_metadata",
]
