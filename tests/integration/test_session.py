"""
Integration tests for DocumentationSession.

Tests cover:
- Documenting types end to end (resolve, register, render)
- Wrapper unwrapping and registry keys
- Concurrent documentation
- Errors and headers
- Snapshots
- Session isolation and injected collaborators
"""

from typing import Awaitable, Optional
from unittest.mock import MagicMock

import pytest

from schemadoc.config import Settings
from schemadoc.errors import SchemaNotFoundError
from schemadoc.schema.fields import FieldDescriptor, ReflectiveFieldProvider
from schemadoc.schema.registry import ApiHeader
from schemadoc.schema.types import PropertyKind
from schemadoc.session import DocumentationSession, unwrap_return_type
from tests.domain.api import Account, AccountLocked, AccountNotFound, Contact, Envelope, ErrorBody
from tests.domain.models import Address, Author, Box, Category, CreateUser, Node, Order, Tag
from tests.external import GeoPoint


@pytest.fixture
def session():
    """Session documenting the tests.domain namespace."""
    return DocumentationSession(Settings(base_packages=["tests.domain"]))


class TestDocumentType:
    """Tests for document_type."""

    def test_register_and_render(self, session):
        key = session.document_type(Node)

        assert key == "Node"
        assert session.render_ref(key)["model"] == {"id": "string", "children": [{"$ref": "Node"}]}

    def test_wrapped_type_keyed_as_requested(self, session):
        """Optional[Node] resolves Node but registers under the wrapped key."""
        key = session.document_type(Optional[Node])

        assert key == "Union.Node.None"
        assert session.render_ref(key)["model"]["id"] == "string"

    def test_awaitable_unwrapped(self, session):
        key = session.document_type(Awaitable[CreateUser])

        assert key == "Awaitable.CreateUser"
        assert "username" in session.render_ref(key)["model"]

    def test_generic_instantiations_distinct(self, session):
        key_a = session.document_type(Box[Address])
        key_b = session.document_type(Box[Tag])

        assert (key_a, key_b) == ("Box.Address", "Box.Tag")
        assert session.render_ref(key_a)["model"]["item"] != session.render_ref(key_b)["model"]["item"]

    def test_collection(self, session):
        key = session.document_type(list[Tag])

        assert key == "list.Tag"
        assert session.render_ref(key)["model"] == [{"name": "string"}]

    def test_skipped_types(self, session):
        """Leaves, None and classes outside the boundary are not documented."""
        assert session.document_type(str) is None
        assert session.document_type(Optional[int]) is None
        assert session.document_type(None) is None
        assert session.document_type(GeoPoint) is None
        assert len(session.schemas) == 0

    def test_idempotent(self, session):
        first = session.document_type(Address)
        stored = session.schemas.get(first)

        assert session.document_type(Address) == first
        assert session.schemas.get(first) is stored
        assert len(session.schemas) == 1

    def test_pydantic_generic(self, session):
        key = session.document_type(Envelope[Account])

        assert key == "Envelope.Account"
        model = session.render_ref(key)["model"]
        assert model["data"]["parent"] == {"$ref": "Account"}

    def test_metadata_on_request(self, session):
        key = session.document_type(CreateUser)
        rendered = session.render_ref(key, include_metadata=True)

        assert rendered["metadata"]["username"]["required"] is True
        assert "MIN_LENGTH:3" in rendered["metadata"]["username"]["constraints"]


class TestDocumentTypes:
    """Tests for concurrent documentation."""

    def test_keys_in_input_order(self, session):
        types = [Node, Author, str, Category, Order, Box[Address], GeoPoint]

        keys = session.document_types(types)

        assert keys == ["Node", "Author", None, "Category", "Order", "Box.Address", None]

    def test_concurrent_matches_sequential(self):
        types = [Node, Author, Category, Order, CreateUser, Account] * 4
        sequential = DocumentationSession(Settings(base_packages=["tests.domain"], max_workers=1))
        parallel = DocumentationSession(Settings(base_packages=["tests.domain"], max_workers=8))

        sequential.document_types(types)
        parallel.document_types(types)

        assert len(parallel.schemas) == 6
        assert parallel.schemas.fingerprint() == sequential.schemas.fingerprint()


class TestRenderRef:
    """Tests for render_ref."""

    def test_unknown_key(self, session):
        with pytest.raises(SchemaNotFoundError, match="Missing"):
            session.render_ref("Missing")

    def test_resolve_without_registering(self, session):
        schema = session.resolve_schema(Address)

        assert len(session.schemas) == 0
        assert session.render(schema)["example_model"]["city"] == "hello"
        assert session.register_and_get_ref(Address, schema) == "Address"


class TestErrors:
    """Tests for documented errors."""

    def test_error_with_body(self, session):
        key = session.document_error(
            AccountNotFound, 404, "Account does not exist", error_code="ACC_404", body_type=ErrorBody
        )

        assert session.render_error(key) == {
            "status": "NOT_FOUND",
            "status_code": 404,
            "description": "Account does not exist",
            "error_code": "ACC_404",
            "response": {
                "model": {"code": "string", "message": "string"},
                "example_model": {"code": "hello", "message": "hello"},
            },
        }

    def test_error_without_body(self, session):
        key = session.document_error(AccountLocked, 423, "Account is locked")

        rendered = session.render_error(key)

        assert rendered["status"] == "LOCKED"
        assert rendered["response"] is None

    def test_error_refs(self, session):
        session.document_error(AccountLocked, 423, "Account is locked")

        assert session.errors.error_refs([AccountNotFound, AccountLocked]) == [
            "tests.domain.api.AccountLocked"
        ]

    def test_unknown_error(self, session):
        with pytest.raises(SchemaNotFoundError):
            session.render_error("tests.domain.api.Nope")


class TestSnapshot:
    """Tests for snapshot."""

    def test_contents(self, session):
        session.document_types([Address, Node])
        session.document_error(AccountNotFound, 404, "Account does not exist", body_type=ErrorBody)
        session.document_headers(ApiHeader("X-Request-Id", PropertyKind.UUID, required=True))

        snapshot = session.snapshot()

        assert snapshot["version"] == 1
        assert snapshot["fingerprint"].startswith("sha256:")
        assert list(snapshot["schemas"]) == ["Address", "ErrorBody", "Node"]
        assert "metadata" in snapshot["schemas"]["Address"]
        assert list(snapshot["errors"]) == ["tests.domain.api.AccountNotFound"]
        assert snapshot["headers"]["X-Request-Id"]["type"] == "uuid"

    def test_without_metadata(self, session):
        session.document_type(Address)

        snapshot = session.snapshot(include_metadata=False)

        assert "metadata" not in snapshot["schemas"]["Address"]

    def test_deterministic(self):
        snapshots = []
        for _ in range(2):
            session = DocumentationSession(Settings(base_packages=["tests.domain"]))
            session.document_types([Order, Node, Contact])
            snapshots.append(session.snapshot())

        assert snapshots[0] == snapshots[1]


class TestIsolation:
    """Tests for session scoping and injection."""

    def test_sessions_do_not_share_registries(self):
        first = DocumentationSession(Settings(base_packages=["tests.domain"]))
        second = DocumentationSession(Settings(base_packages=["tests.domain"]))

        first.document_type(Address)

        assert "Address" in first.schemas
        assert "Address" not in second.schemas

    def test_private_fields_setting(self):
        session = DocumentationSession(
            Settings(base_packages=["tests.domain"], skip_private_fields=False)
        )

        assert "_secret" in session.render(session.resolve_schema(CreateUser))["model"]

    def test_injected_field_provider(self):
        provider = MagicMock(spec=ReflectiveFieldProvider)
        provider.fields_of.return_value = [FieldDescriptor("value", int)]
        session = DocumentationSession(Settings(), field_provider=provider, boundary=lambda tp: True)

        key = session.document_type(Address)

        assert session.render_ref(key)["model"] == {"value": "number"}
        provider.fields_of.assert_called_once_with(Address)

    def test_unwrap_return_type(self):
        assert unwrap_return_type(Awaitable[Optional[Address]]) is Address
