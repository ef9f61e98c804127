"""Registry engine: load registry.json and upsert PRD entries.

Pure data logic, no I/O. The registry is always re-read from the remote
before an upsert, and upsert() never mutates the registry it is given.

Recovery policy: absent content gives a fresh registry. Content that is
not valid JSON, not a JSON object, or whose "items" is not a list is
replaced by a fresh registry (recovered=True, logged as a warning). Single
entries that fail the schema are dropped one by one and listed in
RegistryLoad.skipped; the rest of the registry is kept.
"""

import json
import logging
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError

from vulcan_prd.models import Registry, RegistryEntry
from vulcan_prd.naming import iso_timestamp

LOG = logging.getLogger("vulcan_prd.registry")

REGISTRY_VERSION = "1"


class RegistryLoad(BaseModel):
    """Parsed registry plus whether corrupt content was discarded."""

    registry: Registry
    recovered: bool = False
    reason: str | None = None
    skipped: List[str] = Field(default_factory=list)


class UpsertOutcome(BaseModel):
    """New registry state and the single update-vs-insert decision behind it."""

    registry: Registry
    entry: RegistryEntry
    is_update: bool
    index: int


def new_registry() -> Registry:
    return Registry(version=REGISTRY_VERSION, items=[])


def load_registry(raw: str | None) -> RegistryLoad:
    """Parse registry.json content into a Registry.

    Args:
        raw: File content, or None when the file does not exist.

    Returns:
        RegistryLoad; recovered is True when raw was present but unusable.
    """
    if raw is None or not raw.strip():
        return RegistryLoad(registry=new_registry())
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return recovered_registry(f"registry.json is not valid JSON ({e})")
    if not isinstance(data, dict):
        return recovered_registry(f"registry.json top level is {type(data).__name__}, expected object")
    items = data.get("items")
    if items is None:
        items = []
    if not isinstance(items, list):
        return recovered_registry(f"registry.json items is {type(items).__name__}, expected array")

    entries: List[RegistryEntry] = []
    skipped: List[str] = []
    for index, item in enumerate(items):
        try:
            entries.append(RegistryEntry.model_validate(item))
        except SchemaError as e:
            skipped.append(f"items[{index}]: {_describe(item)} ({e.error_count()} errors)")
    if skipped:
        LOG.warning("Dropping malformed registry.json entries: %s", "; ".join(skipped))

    try:
        registry = Registry.model_validate({**data, "items": entries})
    except SchemaError as e:
        return recovered_registry(f"registry.json does not match the registry schema ({e.error_count()} errors)")
    return RegistryLoad(registry=registry, skipped=skipped)


def _describe(item: object) -> str:
    if isinstance(item, dict) and item.get("product_name"):
        return repr(item["product_name"])
    return type(item).__name__


def recovered_registry(reason: str) -> RegistryLoad:
    """Fresh registry standing in for unusable content."""
    LOG.warning("%s; starting a new registry, existing entries will be replaced", reason)
    return RegistryLoad(registry=new_registry(), recovered=True, reason=reason)


def find_entry(registry: Registry, prd_path: str, product_name: str) -> int | None:
    """Index of the first entry with the same path or product name."""
    for index, item in enumerate(registry.items):
        if item.matches(prd_path, product_name):
            return index
    return None


def upsert(registry: Registry, candidate: RegistryEntry, now: datetime | None = None) -> UpsertOutcome:
    """Update the matching entry or append candidate.

    On update the candidate's fields override the stored ones, created_at is
    kept and updated_at is set to now. On insert both timestamps are now.
    """
    stamp = iso_timestamp(now)
    items = [item.model_copy(deep=True) for item in registry.items]
    index = find_entry(registry, candidate.prd_path, candidate.product_name)

    if index is not None:
        old = items[index]
        merged = {
            **old.model_dump(),
            **candidate.model_dump(exclude={"created_at", "updated_at"}),
            "created_at": old.created_at or stamp,
            "updated_at": stamp,
        }
        entry = RegistryEntry.model_validate(merged)
        items[index] = entry
        is_update = True
    else:
        entry = candidate.model_copy(update={"created_at": stamp, "updated_at": stamp})
        items.append(entry)
        index = len(items) - 1
        is_update = False

    updated = registry.model_copy(update={"items": items})
    return UpsertOutcome(registry=updated, entry=entry, is_update=is_update, index=index)


def dump_registry(registry: Registry) -> str:
    """Serialize as pretty-printed UTF-8 JSON with a trailing newline."""
    return json.dumps(registry.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"
