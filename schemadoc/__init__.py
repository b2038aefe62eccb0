"""
schemadoc - schema documentation from Python types.

schemadoc introspects dataclasses, pydantic models and annotated classes and
produces a structured schema tree for each of them, then renders that tree as
a model skeleton, an example payload and per-field metadata.

Example:
    >>> from schemadoc import DocumentationSession, Settings
    >>> session = DocumentationSession(Settings(base_packages=["myapp"]))
    >>> key = session.document_type(User)
    >>> session.render_ref(key, include_metadata=True)
"""

from .config import Settings, setup_logging
from .errors import SchemaContractError, SchemaDocError, SchemaNotFoundError
from .session import DocumentationSession
from .view import render, render_request, render_response

__version__ = "0.1.0"

__all__ = [
    "DocumentationSession",
    "Settings",
    "setup_logging",
    "render",
    "render_request",
    "render_response",
    "SchemaDocError",
    "SchemaContractError",
    "SchemaNotFoundError",
]
