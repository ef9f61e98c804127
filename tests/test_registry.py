"""Tests for registry loading, upsert and serialization."""

import json
import logging
from datetime import UTC, datetime

import pytest

from vulcan_prd.models import Registry, RegistryEntry
from vulcan_prd.registry import dump_registry, find_entry, load_registry, upsert

T0 = datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)
T1 = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


def _candidate(**overrides) -> RegistryEntry:
    data = {
        "product_name": "Foo",
        "domain": "analytics",
        "prd_path": "prds/analytics/foo.md",
    }
    data.update(overrides)
    return RegistryEntry(**data)


def _existing_registry() -> Registry:
    return Registry(
        version="1",
        items=[
            RegistryEntry(
                product_name="Foo",
                domain="analytics",
                owner_team="data-eng",
                prd_path="prds/analytics/foo.md",
                tags=["old"],
                created_at="2024-01-01T00:00:00.000Z",
                updated_at="2024-01-01T00:00:00.000Z",
            )
        ],
    )


class TestLoadRegistry:
    def test_absent_content_gives_fresh_registry(self) -> None:
        loaded = load_registry(None)
        assert loaded.recovered is False
        assert loaded.registry.version == "1"
        assert loaded.registry.items == []

    def test_valid_content(self) -> None:
        raw = json.dumps(
            {"version": "1", "items": [{"product_name": "Foo", "domain": "analytics", "prd_path": "prds/analytics/foo.md"}]}
        )
        loaded = load_registry(raw)
        assert loaded.recovered is False
        assert loaded.registry.items[0].product_name == "Foo"
        assert loaded.registry.items[0].tags == []
        assert loaded.registry.items[0].owner_team == ""

    def test_integer_version_is_coerced(self) -> None:
        loaded = load_registry('{"version": 1, "items": []}')
        assert loaded.recovered is False
        assert loaded.registry.version == "1"

    def test_missing_items_defaults_to_empty(self) -> None:
        loaded = load_registry('{"version": "1"}')
        assert loaded.recovered is False
        assert loaded.registry.items == []

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "[1, 2, 3]",
            '"just a string"',
            '{"version": "1", "items": {"a": 1}}',
            '{"version": {"major": 1}, "items": []}',
        ],
    )
    def test_corrupt_content_is_replaced(self, raw: str, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="vulcan_prd.registry"):
            loaded = load_registry(raw)
        assert loaded.recovered is True
        assert loaded.reason
        assert loaded.registry.items == []
        assert loaded.registry.version == "1"
        assert any("new registry" in r.getMessage() for r in caplog.records)

    def test_null_optional_fields_are_coerced(self) -> None:
        raw = json.dumps(
            {
                "version": "1",
                "items": [
                    {
                        "product_name": "Keep",
                        "domain": "finance",
                        "prd_path": "prds/finance/keep.md",
                        "owner_team": None,
                        "source_repo": None,
                        "tags": None,
                    }
                ],
            }
        )
        loaded = load_registry(raw)
        assert loaded.recovered is False
        assert loaded.skipped == []
        item = loaded.registry.items[0]
        assert (item.owner_team, item.source_repo, item.tags) == ("", "", [])
        outcome = upsert(loaded.registry, _candidate(product_name="New", prd_path="prds/analytics/new.md"), now=T0)
        assert [i.product_name for i in outcome.registry.items] == ["Keep", "New"]

    def test_malformed_entries_are_dropped_individually(self, caplog: pytest.LogCaptureFixture) -> None:
        raw = json.dumps(
            {
                "version": "1",
                "items": [
                    {"product_name": "Keep", "domain": "analytics", "prd_path": "prds/analytics/keep.md"},
                    {"product_name": "NoDomain", "prd_path": "prds/x/no-domain.md"},
                    "not an entry",
                ],
            }
        )
        with caplog.at_level(logging.WARNING, logger="vulcan_prd.registry"):
            loaded = load_registry(raw)
        assert loaded.recovered is False
        assert [i.product_name for i in loaded.registry.items] == ["Keep"]
        assert len(loaded.skipped) == 2
        assert loaded.skipped[0].startswith("items[1]: 'NoDomain'")
        assert loaded.skipped[1].startswith("items[2]: str")
        assert any("Dropping malformed" in r.getMessage() for r in caplog.records)


class TestUpsert:
    def test_insert_into_empty_registry(self) -> None:
        outcome = upsert(Registry(), _candidate(), now=T0)
        assert outcome.is_update is False
        assert outcome.index == 0
        assert len(outcome.registry.items) == 1
        item = outcome.registry.items[0]
        assert item.created_at == item.updated_at == "2024-01-01T00:00:00.000Z"

    def test_update_by_path_preserves_created_at(self) -> None:
        registry = _existing_registry()
        outcome = upsert(registry, _candidate(tags=["new", "tags"]), now=T1)
        assert outcome.is_update is True
        assert len(outcome.registry.items) == 1
        item = outcome.registry.items[0]
        assert item.created_at == "2024-01-01T00:00:00.000Z"
        assert item.updated_at == "2024-06-01T12:00:00.000Z"
        assert item.tags == ["new", "tags"]

    def test_candidate_fields_override_stored_fields(self) -> None:
        outcome = upsert(_existing_registry(), _candidate(owner_team=""), now=T1)
        assert outcome.registry.items[0].owner_team == ""

    def test_update_by_product_name_across_paths(self) -> None:
        candidate = _candidate(domain="finance", prd_path="prds/finance/foo.md")
        outcome = upsert(_existing_registry(), candidate, now=T1)
        assert outcome.is_update is True
        assert len(outcome.registry.items) == 1
        assert outcome.registry.items[0].prd_path == "prds/finance/foo.md"
        assert outcome.registry.items[0].domain == "finance"

    def test_insert_appends_after_existing(self) -> None:
        candidate = _candidate(product_name="Bar", prd_path="prds/analytics/bar.md")
        outcome = upsert(_existing_registry(), candidate, now=T1)
        assert outcome.is_update is False
        assert outcome.index == 1
        assert [i.product_name for i in outcome.registry.items] == ["Foo", "Bar"]

    def test_input_registry_is_not_mutated(self) -> None:
        registry = _existing_registry()
        upsert(registry, _candidate(tags=["changed"]), now=T1)
        upsert(registry, _candidate(product_name="Bar", prd_path="prds/analytics/bar.md"), now=T1)
        assert len(registry.items) == 1
        assert registry.items[0].tags == ["old"]
        assert registry.items[0].updated_at == "2024-01-01T00:00:00.000Z"

    def test_first_match_wins(self) -> None:
        registry = Registry(
            items=[
                RegistryEntry(product_name="Foo", domain="a", prd_path="prds/a/foo.md"),
                RegistryEntry(product_name="Other", domain="analytics", prd_path="prds/analytics/foo.md"),
            ]
        )
        assert find_entry(registry, "prds/analytics/foo.md", "Foo") == 0
        outcome = upsert(registry, _candidate(), now=T1)
        assert outcome.index == 0

    def test_corrupt_registry_behaves_like_empty(self) -> None:
        from_corrupt = upsert(load_registry("{oops").registry, _candidate(), now=T0)
        from_empty = upsert(load_registry(None).registry, _candidate(), now=T0)
        assert from_corrupt.registry.model_dump() == from_empty.registry.model_dump()

    def test_extra_entry_keys_survive_update(self) -> None:
        raw = json.dumps(
            {
                "version": "1",
                "items": [
                    {
                        "product_name": "Foo",
                        "domain": "analytics",
                        "prd_path": "prds/analytics/foo.md",
                        "status": "approved",
                    }
                ],
            }
        )
        outcome = upsert(load_registry(raw).registry, _candidate(), now=T1)
        dumped = json.loads(dump_registry(outcome.registry))
        assert dumped["items"][0]["status"] == "approved"
        assert dumped["items"][0]["created_at"] == "2024-06-01T12:00:00.000Z"


class TestDumpRegistry:
    def test_pretty_printed_with_trailing_newline(self) -> None:
        text = dump_registry(Registry())
        assert text.endswith("}\n")
        assert '\n  "version": "1"' in text
        assert json.loads(text) == {"version": "1", "items": []}

    def test_keeps_unicode(self) -> None:
        outcome = upsert(Registry(), _candidate(product_name="Café"), now=T0)
        assert "Café" in dump_registry(outcome.registry)

    def test_round_trip(self) -> None:
        registry = _existing_registry()
        assert load_registry(dump_registry(registry)).registry == registry
