"""
schemadoc Test Suite.

This package contains:
- domain/: Fixture types documented by the tests (the "application" namespace)
- unit/: Unit tests (no I/O)
- integration/: Session and CLI tests over the fixture types
"""
