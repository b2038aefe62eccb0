"""
Schema CLI tool for schemadoc.

This tool exports documentation for the types of a Python module:
- snapshot: Resolve, register and render types; print the full snapshot
- render: Render the views of a single type

Usage:
    schemadoc snapshot --module myapp.models --type User --type Order > docs.json
    schemadoc snapshot --module myapp.models --base-package myapp --format yaml
    schemadoc render --module myapp.models --type User --no-metadata

Invariants:
    - Output is deterministic (sorted keys)
    - Unknown modules or types exit non-zero with a message on stderr
    - Logging goes to stderr, documents to stdout or --output

How to change safely:
    - Add new commands, don't modify existing ones
    - Keep output format stable for CI parsing
"""

from __future__ import annotations

import argparse
import importlib
import inspect
import json
import logging
import sys
from typing import Any, Optional

import yaml

from ..config import Settings, setup_logging
from ..errors import SchemaDocError
from ..session import DocumentationSession

logger = logging.getLogger(__name__)

FORMATS = ("json", "yaml")


class SchemaCLI:
    """CLI tool for schema documentation.

    Provides commands for:
    - Building a snapshot of several types
    - Rendering the views of one type
    - Serializing results as JSON or YAML

    Example:
        >>> cli = SchemaCLI()
        >>> session = DocumentationSession(Settings(base_packages=["myapp"]))
        >>> print(cli.dump(cli.snapshot(session, [User]), "yaml"))
    """

    def snapshot(
        self,
        session: DocumentationSession,
        types: list[Any],
        include_metadata: bool = True,
    ) -> dict[str, Any]:
        """Document ``types`` and return the session snapshot.

        Args:
            session: Session to register into
            types: Types to document
            include_metadata: Include the metadata view for every schema

        Returns:
            Snapshot dictionary
        """
        session.document_types(types)
        return session.snapshot(include_metadata=include_metadata)

    def render(
        self,
        session: DocumentationSession,
        tp: Any,
        include_metadata: bool = True,
    ) -> dict[str, Any]:
        """Resolve one type and render its views without registering it."""
        return session.render(session.resolve_schema(tp), include_metadata)

    def dump(self, data: dict[str, Any], fmt: str = "json") -> str:
        """Serialize command output.

        Args:
            data: Output dictionary
            fmt: "json" or "yaml"

        Returns:
            Serialized text
        """
        text = json.dumps(data, indent=2, sort_keys=True, default=str)
        if fmt == "yaml":
            # Declared examples may be any Python value; YAML gets their JSON form
            return yaml.safe_dump(json.loads(text), sort_keys=True, default_flow_style=False)
        return text


def _load_types(module_path: str, names: Optional[list[str]] = None) -> list[Any]:
    """Import ``module_path`` and pick the requested types.

    Args:
        module_path: Python module path containing the types
        names: Attribute names; all classes defined in the module when empty

    Returns:
        List of type objects

    Raises:
        SchemaDocError: If a requested name is missing from the module
    """
    module = importlib.import_module(module_path)
    if not names:
        return [
            obj
            for _, obj in inspect.getmembers(module, inspect.isclass)
            if obj.__module__ == module.__name__
        ]

    types = []
    for name in names:
        if not hasattr(module, name):
            raise SchemaDocError(
                f"Module {module_path} has no type '{name}'",
                code="TYPE_NOT_FOUND",
                details={"module": module_path, "type": name},
            )
        types.append(getattr(module, name))
    return types


def _settings(args: argparse.Namespace) -> Settings:
    overrides: dict[str, Any] = {}
    if args.base_package:
        overrides["base_packages"] = args.base_package
    if args.log_level:
        overrides["log_level"] = args.log_level
    return Settings(**overrides)


def _write(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w") as f:
            f.write(text)
        print(f"Documentation exported to {output}", file=sys.stderr)
    else:
        print(text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="schemadoc", description="schemadoc documentation tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def common(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--module", "-m", required=True, help="Python module containing the types")
        sub.add_argument("--base-package", action="append", help="Package whose classes are expanded (repeatable)")
        sub.add_argument("--format", "-f", choices=FORMATS, default="json", help="Output format")
        sub.add_argument("--no-metadata", action="store_true", help="Omit the metadata view")
        sub.add_argument("--output", "-o", help="Output file (default: stdout)")
        sub.add_argument("--log-level", help="Override SCHEMADOC_LOG_LEVEL")

    # snapshot command
    snapshot_parser = subparsers.add_parser("snapshot", help="Document types and export a snapshot")
    common(snapshot_parser)
    snapshot_parser.add_argument(
        "--type", "-t", action="append", dest="types", help="Type name (repeatable; default: all classes)"
    )

    # render command
    render_parser = subparsers.add_parser("render", help="Render the views of one type")
    common(render_parser)
    render_parser.add_argument("--type", "-t", required=True, help="Type name")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for the schemadoc tool."""
    args = build_parser().parse_args(argv)
    settings = _settings(args)
    setup_logging(settings)

    cli = SchemaCLI()
    session = DocumentationSession(settings)
    include_metadata = not args.no_metadata

    try:
        if args.command == "snapshot":
            types = _load_types(args.module, args.types)
            output = cli.snapshot(session, types, include_metadata=include_metadata)
        else:
            (tp,) = _load_types(args.module, [args.type])
            output = cli.render(session, tp, include_metadata=include_metadata)
    except (ImportError, SchemaDocError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _write(cli.dump(output, args.format), args.output)


if __name__ == "__main__":
    main()
