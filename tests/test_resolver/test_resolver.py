"""Tests for speclint.resolver.resolver."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from speclint.exceptions import ResolveError
from speclint.node_types import get_types
from speclint.resolver.document import Document, Location, Source
from speclint.resolver.loader import make_document
from speclint.resolver.resolver import BaseResolver, is_ref, ref_key, resolve_document


def _doc(parsed, ref: str = "/specs/api.yaml") -> Document:
    return Document(Source(ref), parsed)


class TestIsRef:
    def test_ref_mapping(self) -> None:
        assert is_ref({"$ref": "#/a"})

    def test_non_string_ref(self) -> None:
        assert not is_ref({"$ref": 1})

    def test_non_mapping(self) -> None:
        assert not is_ref("#/a")
        assert not is_ref(None)


class TestResolveExternalRef:
    def test_relative_file(self) -> None:
        resolver = BaseResolver()
        assert resolver.resolve_external_ref("/specs/api.yaml", "./schemas/pet.yaml") == (
            "/specs/schemas/pet.yaml"
        )

    def test_parent_directory(self) -> None:
        resolver = BaseResolver()
        assert resolver.resolve_external_ref("/specs/v1/api.yaml", "../common.yaml") == (
            "/specs/common.yaml"
        )

    def test_relative_to_url(self) -> None:
        resolver = BaseResolver()
        assert resolver.resolve_external_ref(
            "https://example.com/specs/api.yaml", "pet.yaml"
        ) == "https://example.com/specs/pet.yaml"

    def test_absolute_url(self) -> None:
        resolver = BaseResolver()
        assert resolver.resolve_external_ref(
            "/specs/api.yaml", "https://example.com/pet.yaml"
        ) == "https://example.com/pet.yaml"


# ---------------------------------------------------------------------------
# resolve_ref
# ---------------------------------------------------------------------------


class TestResolveRef:
    def test_local_ref(self) -> None:
        doc = _doc({"components": {"schemas": {"Pet": {"type": "object"}}}})
        resolved = asyncio.run(BaseResolver().resolve_ref("#/components/schemas/Pet", doc))
        assert resolved.resolved
        assert resolved.node == {"type": "object"}
        assert resolved.location == Location(doc.source, "#/components/schemas/Pet")
        assert resolved.document is doc

    def test_follows_chains(self) -> None:
        doc = _doc({"a": {"$ref": "#/b"}, "b": {"$ref": "#/c"}, "c": {"type": "string"}})
        resolved = asyncio.run(BaseResolver().resolve_ref("#/a", doc))
        assert resolved.node == {"type": "string"}
        assert resolved.location.pointer == "#/c"

    def test_circular_chain(self) -> None:
        doc = _doc({"a": {"$ref": "#/b"}, "b": {"$ref": "#/a"}})
        with pytest.raises(ResolveError, match="Self-referencing circular pointer"):
            asyncio.run(BaseResolver().resolve_ref("#/a", doc))

    def test_missing_target(self) -> None:
        doc = _doc({})
        with pytest.raises(ResolveError, match="not found") as exc_info:
            asyncio.run(BaseResolver().resolve_ref("#/components/schemas/Nope", doc))
        assert exc_info.value.ref == "#/components/schemas/Nope"

    def test_targets_are_cached(self) -> None:
        doc = _doc({"a": {"type": "string"}})
        resolver = BaseResolver()
        first = asyncio.run(resolver.resolve_ref("#/a", doc))
        second = asyncio.run(resolver.resolve_ref("#/a", doc))
        assert first is second

    def test_external_file(self, tmp_path: Path) -> None:
        (tmp_path / "pet.yaml").write_text("Pet:\n  type: object\n")
        root = _doc({}, str(tmp_path / "api.yaml"))
        resolved = asyncio.run(BaseResolver().resolve_ref("./pet.yaml#/Pet", root))
        assert resolved.node == {"type": "object"}
        assert resolved.location.source.absolute_ref == str(tmp_path / "pet.yaml")
        assert resolved.location.pointer == "#/Pet"


class _CountingResolver(BaseResolver):
    def __init__(self) -> None:
        super().__init__()
        self.loads: list[str] = []

    async def load_external_ref(self, absolute_ref: str) -> Document:
        self.loads.append(absolute_ref)
        await asyncio.sleep(0)
        return make_document(Source(absolute_ref, "type: string\n"))


class TestLoadDocument:
    def test_concurrent_requests_share_one_load(self) -> None:
        resolver = _CountingResolver()

        async def run() -> list[Document]:
            return await asyncio.gather(
                *(resolver.load_document("/specs/api.yaml", "./pet.yaml") for _ in range(5))
            )

        documents = asyncio.run(run())
        assert resolver.loads == ["/specs/pet.yaml"]
        assert all(d is documents[0] for d in documents)

    def test_loaded_document_is_reused_across_runs(self) -> None:
        resolver = _CountingResolver()
        asyncio.run(resolver.load_document(None, "/specs/pet.yaml"))
        asyncio.run(resolver.load_document(None, "/specs/pet.yaml"))
        assert resolver.loads == ["/specs/pet.yaml"]
        assert resolver.get_document("/specs/pet.yaml") is not None


class TestResolveLoadedRef:
    def test_local(self) -> None:
        doc = _doc({"a": {"type": "string"}})
        resolved = BaseResolver().resolve_loaded_ref("#/a", doc)
        assert resolved.node == {"type": "string"}

    def test_unloaded_document(self) -> None:
        doc = _doc({})
        with pytest.raises(ResolveError, match="is not loaded"):
            BaseResolver().resolve_loaded_ref("./other.yaml", doc)


# ---------------------------------------------------------------------------
# resolve_document pre-pass
# ---------------------------------------------------------------------------


class TestResolveDocument:
    @pytest.fixture()
    def types(self):
        return get_types("oas3_0")

    def test_collects_refs_by_ref_node(self, types) -> None:
        doc = _doc(
            {
                "openapi": "3.0.0",
                "paths": {},
                "components": {
                    "schemas": {
                        "A": {"$ref": "#/components/schemas/B"},
                        "B": {"type": "object"},
                    }
                },
            }
        )
        resolved_refs = asyncio.run(
            resolve_document(doc, types["Root"], BaseResolver(), types)
        )
        key = ref_key(Location(doc.source, "#/components/schemas/A"))
        assert list(resolved_refs) == [key]
        assert resolved_refs[key].location.pointer == "#/components/schemas/B"

    def test_ignores_ref_keys_in_free_form_values(self, types) -> None:
        doc = _doc(
            {
                "openapi": "3.0.0",
                "paths": {},
                "components": {
                    "examples": {"E": {"value": {"$ref": "#/does/not/exist"}}}
                },
            }
        )
        resolved_refs = asyncio.run(
            resolve_document(doc, types["Root"], BaseResolver(), types)
        )
        assert resolved_refs == {}

    def test_records_failures(self, types) -> None:
        doc = _doc(
            {
                "openapi": "3.0.0",
                "paths": {},
                "components": {"schemas": {"A": {"$ref": "#/nope"}}},
            }
        )
        resolved_refs = asyncio.run(
            resolve_document(doc, types["Root"], BaseResolver(), types)
        )
        (resolved,) = resolved_refs.values()
        assert not resolved.resolved
        assert isinstance(resolved.error, ResolveError)

    def test_terminates_on_cycles(self, types) -> None:
        doc = _doc(
            {
                "openapi": "3.0.0",
                "paths": {},
                "components": {
                    "schemas": {
                        "A": {"properties": {"b": {"$ref": "#/components/schemas/B"}}},
                        "B": {"properties": {"a": {"$ref": "#/components/schemas/A"}}},
                    }
                },
            }
        )
        resolved_refs = asyncio.run(
            resolve_document(doc, types["Root"], BaseResolver(), types)
        )
        assert len(resolved_refs) == 2

    def test_resolves_refs_beside_a_ref_in_3_1_schemas(self) -> None:
        types = get_types("oas3_1")
        doc = _doc(
            {
                "openapi": "3.1.0",
                "components": {
                    "schemas": {
                        "A": {
                            "$ref": "#/components/schemas/B",
                            "properties": {"c": {"$ref": "#/components/schemas/C"}},
                        },
                        "B": {"type": "object"},
                        "C": {"type": "string"},
                    }
                },
            }
        )
        resolved_refs = asyncio.run(
            resolve_document(doc, types["Root"], BaseResolver(), types)
        )
        key = ref_key(Location(doc.source, "#/components/schemas/A/properties/c"))
        assert resolved_refs[key].location.pointer == "#/components/schemas/C"


# ---------------------------------------------------------------------------
# Replacing documents
# ---------------------------------------------------------------------------


class TestAddDocument:
    def test_replacing_a_document_drops_its_targets(self) -> None:
        resolver = BaseResolver()
        first = _doc({"a": {"type": "object"}})
        resolver.add_document(first)
        assert resolver.resolve_loaded_ref("#/a", first).node == {"type": "object"}

        second = _doc({"a": {"type": "bogus"}})
        resolver.add_document(second)
        resolved = resolver.resolve_loaded_ref("#/a", second)

        assert resolved.node == {"type": "bogus"}
        assert resolved.document is second
        assert resolver.get_document("/specs/api.yaml") is second

    def test_re_adding_the_same_document_keeps_targets(self) -> None:
        resolver = BaseResolver()
        doc = _doc({"a": {"type": "object"}})
        resolver.add_document(doc)
        before = resolver.resolve_loaded_ref("#/a", doc)
        resolver.add_document(doc)
        assert resolver.resolve_loaded_ref("#/a", doc) is before

    def test_other_documents_keep_their_targets(self) -> None:
        resolver = BaseResolver()
        pet = _doc({"Pet": {"type": "object"}}, "/specs/pet.yaml")
        resolver.add_document(pet)
        before = resolver.resolve_loaded_ref("#/Pet", pet)

        resolver.add_document(_doc({}, "/specs/api.yaml"))
        resolver.add_document(_doc({"x": 1}, "/specs/api.yaml"))

        assert resolver.resolve_loaded_ref("#/Pet", pet) is before
