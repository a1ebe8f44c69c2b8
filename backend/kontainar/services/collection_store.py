# Overview: Generic named collection of JSON records persisted as one blob per key.

"""
CollectionStore

Every domain (products, users, sellers, suppliers, inventory, purchases) is a
configured CollectionStore plus domain rules layered on top.

Persistence model:
- A collection is a JSON array stored under a single string key.
- save_all() is the only write primitive. Every mutation is
  load all -> transform in memory -> save all, under a per-key mutex.
- There is no partial persistence and no atomicity across keys.

Read policy:
- Absent key -> [].
- Malformed blob (bad JSON, not an array of objects) -> [] and a warning is
  logged. StorageReadError never leaves this module.

Record lifecycle:
    create -> update* -> soft_delete -> restore -> ... -> permanent_delete
permanent_delete is allowed from any state and is terminal.
"""

from __future__ import annotations

import copy
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Sequence

from ..storage import KeyValueStorage
from ..time_utils import iso_now, sort_timestamp, to_utc_z
from ..validation import DuplicateKeyError, NotFoundError, StorageReadError
from .concurrency import key_lock


logger = logging.getLogger(__name__)

Record = dict[str, Any]

# Exact-match filter values that mean "no filter".
MATCH_ALL = "all"


# =============================================================================
# Soft-delete encodings
# =============================================================================


class SoftDeletePolicy:
    """How a collection marks records deleted and restored."""

    deleted_state = "deleted"
    active_state = "active"

    def mark_deleted(self, record: Record, now: str) -> None:
        raise NotImplementedError

    def mark_restored(self, record: Record) -> None:
        raise NotImplementedError

    def state(self, record: Record) -> str:
        raise NotImplementedError

    def is_deleted(self, record: Record) -> bool:
        return self.state(record) == self.deleted_state

    def is_active(self, record: Record) -> bool:
        return self.state(record) == self.active_state


class StatusSoftDelete(SoftDeletePolicy):
    """Single enum field, e.g. status: active | inactive | pending | deleted."""

    def __init__(self, field_name: str = "status", *, deleted_value: str = "deleted", active_value: str = "active"):
        self.field_name = field_name
        self.deleted_state = deleted_value
        self.active_state = active_value

    def mark_deleted(self, record: Record, now: str) -> None:
        record[self.field_name] = self.deleted_state
        record["deletedAt"] = now

    def mark_restored(self, record: Record) -> None:
        record[self.field_name] = self.active_state
        record["deletedAt"] = None

    def state(self, record: Record) -> str:
        value = record.get(self.field_name)
        return str(value) if value is not None else "unknown"


class FlagPairSoftDelete(SoftDeletePolicy):
    """
    Two booleans, isActive + isDeleted (the product catalog encoding).

    Derived state: deleted if isDeleted, else active if isActive, else inactive.
    """

    def __init__(self, active_field: str = "isActive", deleted_field: str = "isDeleted"):
        self.active_field = active_field
        self.deleted_field = deleted_field

    def mark_deleted(self, record: Record, now: str) -> None:
        record[self.active_field] = False
        record[self.deleted_field] = True
        record["deletedAt"] = now

    def mark_restored(self, record: Record) -> None:
        record[self.active_field] = True
        record[self.deleted_field] = False
        record["deletedAt"] = None

    def state(self, record: Record) -> str:
        if record.get(self.deleted_field):
            return "deleted"
        if record.get(self.active_field):
            return "active"
        return "inactive"


# =============================================================================
# Uniqueness, filtering and sorting
# =============================================================================


@dataclass(frozen=True)
class UniqueField:
    name: str
    case_insensitive: bool = False
    label: str | None = None

    def normalize(self, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if self.case_insensitive:
                return value.casefold()
        return value

    def message(self, value: Any) -> str:
        label = self.label or self.name
        return f"{label} '{value}' already exists"


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def amount(value: Any) -> int | float:
    """Numeric value of a field, 0 for missing or non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _first_present(record: Record, *names: str) -> Any:
    for name in names:
        if record.get(name) is not None:
            return record[name]
    return None


def _display_name(record: Record) -> str:
    value = _first_present(record, "title", "productName", "name", "businessName", "firstName")
    return str(value or "").casefold()


@dataclass(frozen=True)
class SortOrder:
    key: Callable[[Record], Any]
    descending: bool = False


SORT_ORDERS: dict[str, SortOrder] = {
    "price-low": SortOrder(lambda r: _number(_first_present(r, "salesPrice", "price"))),
    "price-high": SortOrder(lambda r: _number(_first_present(r, "salesPrice", "price")), descending=True),
    "rating": SortOrder(lambda r: _number(r.get("rating")), descending=True),
    "newest": SortOrder(lambda r: sort_timestamp(r.get("createdAt")), descending=True),
    "oldest": SortOrder(lambda r: sort_timestamp(r.get("createdAt"))),
    "name": SortOrder(_display_name),
    "stock-low": SortOrder(lambda r: _number(_first_present(r, "currentStock", "stock"))),
    "stock-high": SortOrder(lambda r: _number(_first_present(r, "currentStock", "stock")), descending=True),
    "value-high": SortOrder(
        lambda r: _number(r.get("currentStock")) * _number(r.get("unitCost")),
        descending=True,
    ),
    "amount-high": SortOrder(lambda r: _number(r.get("total")), descending=True),
    "amount-low": SortOrder(lambda r: _number(r.get("total"))),
    "supplier": SortOrder(lambda r: str(r.get("supplierName") or "").casefold()),
}


@dataclass
class FilterSpec:
    """
    Declarative filter over a collection.

    - equals: field -> value; None or "all" disables that filter
    - ranges: field -> (min, max); either bound may be None; inclusive
    - any_of: field -> values; list fields must intersect, scalar fields must be in the set
    - predicate: extra callable applied last
    - sort_by: a SORT_ORDERS name; unknown names keep stored order
    """
    equals: dict[str, Any] = field(default_factory=dict)
    ranges: dict[str, tuple[Any, Any]] = field(default_factory=dict)
    any_of: dict[str, Iterable[Any]] = field(default_factory=dict)
    predicate: Callable[[Record], bool] | None = None
    sort_by: str | None = None


def resolve_path(record: Any, path: str) -> list[Any]:
    """
    Values reached by a dotted path; lists fan out.

    resolve_path({"items": [{"sku": "A"}, {"sku": "B"}]}, "items.sku") -> ["A", "B"]
    """
    current = [record]
    for part in path.split("."):
        nxt = []
        for value in current:
            if isinstance(value, list):
                value_list = value
            else:
                value_list = [value]
            for item in value_list:
                if isinstance(item, Mapping) and part in item:
                    nxt.append(item[part])
        current = nxt
    flattened = []
    for value in current:
        if isinstance(value, list):
            flattened.extend(value)
        else:
            flattened.append(value)
    return flattened


def _value_matches(value: Any, query: str, lowered: str) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return lowered in value.casefold() or query in value
    if isinstance(value, Mapping):
        return False
    # numbers, booleans: compare the raw query against the rendered value
    return query in str(value)


def matches_query(record: Record, query: str, fields: Sequence[str]) -> bool:
    query = query.strip()
    lowered = query.casefold()
    for path in fields:
        for value in resolve_path(record, path):
            if _value_matches(value, query, lowered):
                return True
    return False


def _in_range(value: Any, bounds: tuple[Any, Any]) -> bool:
    low, high = bounds
    if value is None or isinstance(value, bool):
        return False
    number = _number(value)
    if low is not None and number < _number(low):
        return False
    if high is not None and number > _number(high):
        return False
    return True


def apply_filters(records: Iterable[Record], spec: FilterSpec) -> list[Record]:
    result = list(records)

    for name, expected in spec.equals.items():
        if expected is None or expected == MATCH_ALL:
            continue
        result = [r for r in result if r.get(name) == expected]

    for name, bounds in spec.ranges.items():
        if bounds is None or (bounds[0] is None and bounds[1] is None):
            continue
        result = [r for r in result if _in_range(r.get(name), bounds)]

    for name, wanted in spec.any_of.items():
        wanted_set = set(wanted or ())
        if not wanted_set:
            continue

        def _hit(record: Record, name=name, wanted_set=wanted_set) -> bool:
            value = record.get(name)
            if isinstance(value, (list, tuple, set)):
                return any(v in wanted_set for v in value)
            return value in wanted_set

        result = [r for r in result if _hit(r)]

    if spec.predicate is not None:
        result = [r for r in result if spec.predicate(r)]

    order = SORT_ORDERS.get(spec.sort_by or "")
    if order is not None:
        result.sort(key=order.key, reverse=order.descending)

    return result


def _json_default(value: Any):
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def new_uuid() -> str:
    return str(uuid.uuid4())


# =============================================================================
# CollectionStore
# =============================================================================


class CollectionStore:
    """
    One named collection of records persisted under `key`.

    Args:
        storage: KeyValueStorage backend
        key: storage key (e.g. "sellers")
        seed: records (or a callable returning them) written by initialize()
        prepend: insert new records first (newest-first) instead of last
        unique_fields: fields that must not collide across records
        soft_delete: SoftDeletePolicy, or None for collections without soft delete
        id_factory: callable producing fresh ids
        clock: callable producing ISO-8601 timestamps
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str,
        *,
        seed: Sequence[Record] | Callable[[], Sequence[Record]] | None = None,
        prepend: bool = False,
        unique_fields: Sequence[UniqueField] = (),
        soft_delete: SoftDeletePolicy | None = None,
        id_factory: Callable[[], str] = new_uuid,
        clock: Callable[[], str] = iso_now,
        entity_name: str = "Record",
    ):
        self.storage = storage
        self.key = key
        self.seed = seed
        self.prepend = prepend
        self.unique_fields = tuple(unique_fields)
        self.soft_delete_policy = soft_delete
        self.id_factory = id_factory
        self.clock = clock
        self.entity_name = entity_name

    # ------------------------------------------------------------------
    # Raw persistence
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.storage.get_item(self.key) is not None

    def initialize(self, seed_records: Sequence[Record] | None = None) -> None:
        """Write the seed verbatim if nothing is stored under the key yet."""
        with key_lock(self.key):
            if self.exists():
                return
            records = seed_records
            if records is None:
                records = self.seed() if callable(self.seed) else self.seed
            records = list(records or [])
            self.save_all(records)
            logger.info("Seeded collection %s with %d records", self.key, len(records))

    def _decode(self, raw: str) -> list[Record]:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise StorageReadError(f"{self.key}: invalid JSON ({exc})") from exc
        if not isinstance(data, list):
            raise StorageReadError(f"{self.key}: expected a JSON array, got {type(data).__name__}")
        if any(not isinstance(item, dict) for item in data):
            raise StorageReadError(f"{self.key}: every entry must be a JSON object")
        return data

    def load_all(self) -> list[Record]:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        try:
            return self._decode(raw)
        except StorageReadError as exc:
            logger.warning("Ignoring unreadable collection: %s", exc)
            return []

    def save_all(self, records: Sequence[Record]) -> None:
        payload = json.dumps(list(records), default=_json_default, ensure_ascii=False)
        self.storage.set_item(self.key, payload)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_by_id(self, record_id: str) -> Record | None:
        for record in self.load_all():
            if record.get("id") == record_id:
                return record
        return None

    def get(self, record_id: str) -> Record:
        record = self.find_by_id(record_id)
        if record is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return record

    def find_by(self, field_name: str, value: Any, *, case_insensitive: bool = False) -> Record | None:
        probe = UniqueField(field_name, case_insensitive=case_insensitive)
        wanted = probe.normalize(value)
        for record in self.load_all():
            if probe.normalize(record.get(field_name)) == wanted:
                return record
        return None

    @staticmethod
    def _index_of(records: list[Record], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                return index
        return -1

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _check_unique(self, records: list[Record], candidate: Mapping[str, Any], *, exclude_id: str | None = None) -> None:
        for unique in self.unique_fields:
            if unique.name not in candidate:
                continue
            value = candidate[unique.name]
            if value is None or value == "":
                continue
            wanted = unique.normalize(value)
            for record in records:
                if exclude_id is not None and record.get("id") == exclude_id:
                    continue
                if unique.normalize(record.get(unique.name)) == wanted:
                    raise DuplicateKeyError(unique.message(value), field_name=unique.name, value=value)

    def _fresh_id(self, records: list[Record]) -> str:
        taken = {r.get("id") for r in records}
        for _ in range(10):
            candidate = self.id_factory()
            if candidate not in taken:
                return candidate
        raise RuntimeError(f"Could not generate a unique id for {self.key}")

    def create(
        self,
        data: Mapping[str, Any],
        *,
        defaults: Mapping[str, Any] | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> Record:
        """
        Insert a new record.

        Merge order: defaults, then data, then overrides. id and timestamps are
        always assigned here.

        Raises:
            DuplicateKeyError: a unique field collides with an existing record
        """
        with key_lock(self.key):
            records = self.load_all()
            now = self.clock()

            record: Record = {"id": None}
            record.update(copy.deepcopy(dict(defaults or {})))
            record.update(copy.deepcopy(dict(data)))
            record.update(copy.deepcopy(dict(overrides or {})))

            self._check_unique(records, record)

            record["id"] = self._fresh_id(records)
            record["createdAt"] = now
            record["updatedAt"] = now

            if self.prepend:
                records.insert(0, record)
            else:
                records.append(record)
            self.save_all(records)
            return record

    def update(self, record_id: str, patch: Mapping[str, Any]) -> Record:
        """
        Shallow-merge `patch` onto a record; nested objects are replaced wholesale.

        Raises:
            NotFoundError: no record with this id
            DuplicateKeyError: the patch collides with another record's unique field
        """
        patch = {k: v for k, v in patch.items() if k not in ("id", "createdAt")}
        with key_lock(self.key):
            records = self.load_all()
            index = self._index_of(records, record_id)
            if index == -1:
                raise NotFoundError(f"{self.entity_name} not found")

            self._check_unique(records, patch, exclude_id=record_id)

            updated = dict(records[index])
            updated.update(copy.deepcopy(patch))
            updated["updatedAt"] = self.clock()
            records[index] = updated
            self.save_all(records)
            return updated

    def modify(self, record_id: str, mutator: Callable[[Record], None]) -> Record:
        """
        Apply an in-place mutator to one record, bump updatedAt and persist.

        Used by domain operations that derive the new value from the old one
        (stock adjustments, toggles, counters).
        """
        with key_lock(self.key):
            records = self.load_all()
            index = self._index_of(records, record_id)
            if index == -1:
                raise NotFoundError(f"{self.entity_name} not found")

            updated = copy.deepcopy(records[index])
            mutator(updated)
            updated["id"] = record_id
            self._check_unique(records, updated, exclude_id=record_id)
            updated["updatedAt"] = self.clock()
            records[index] = updated
            self.save_all(records)
            return updated

    def modify_many(self, mutator: Callable[[list[Record]], Iterable[str]]) -> list[str]:
        """
        Apply a mutator over the whole list. The mutator returns the ids it
        changed; those get updatedAt bumped. Persists once.
        """
        with key_lock(self.key):
            records = self.load_all()
            changed = list(mutator(records))
            if not changed:
                return []
            now = self.clock()
            changed_ids = set(changed)
            for record in records:
                if record.get("id") in changed_ids:
                    record["updatedAt"] = now
            self.save_all(records)
            return changed

    def _require_policy(self) -> SoftDeletePolicy:
        if self.soft_delete_policy is None:
            raise TypeError(f"{self.key} does not support soft delete")
        return self.soft_delete_policy

    def soft_delete(self, record_id: str) -> Record:
        """Mark a record deleted and stamp deletedAt. Raises NotFoundError."""
        policy = self._require_policy()
        now = self.clock()
        return self.modify(record_id, lambda record: policy.mark_deleted(record, now))

    def restore(self, record_id: str) -> Record:
        """Reverse of soft_delete: active marker back, deletedAt cleared. Raises NotFoundError."""
        policy = self._require_policy()
        return self.modify(record_id, policy.mark_restored)

    def permanent_delete(self, record_id: str) -> bool:
        """
        Remove a record entirely.

        Always returns True, including when the id was not present.
        """
        with key_lock(self.key):
            records = self.load_all()
            remaining = [r for r in records if r.get("id") != record_id]
            self.save_all(remaining)
            return True

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def lifecycle_state(self, record: Record) -> str:
        if self.soft_delete_policy is None:
            value = record.get("status")
            return str(value) if value is not None else "unknown"
        return self.soft_delete_policy.state(record)

    def search(self, query: str | None, fields: Sequence[str], records: Iterable[Record] | None = None) -> list[Record]:
        """
        Case-insensitive substring match of `query` against any of `fields`.

        An empty or blank query returns the input unfiltered.
        """
        pool = self.load_all() if records is None else list(records)
        if query is None or not str(query).strip():
            return pool
        return [r for r in pool if matches_query(r, str(query), fields)]

    def filter_by(self, spec: FilterSpec, records: Iterable[Record] | None = None) -> list[Record]:
        pool = self.load_all() if records is None else records
        return apply_filters(pool, spec)

    def stats(
        self,
        *,
        group_field: str | None = None,
        sum_fields: Sequence[str] = (),
        average_fields: Sequence[str] = (),
        include: Callable[[Record], bool] | None = None,
        records: Sequence[Record] | None = None,
    ) -> dict:
        """
        Aggregate counts and totals.

        total and byStatus cover every record; byGroup, sums and averages only
        cover records passing `include` (all records when omitted).
        """
        pool = self.load_all() if records is None else list(records)

        by_status: dict[str, int] = {}
        for record in pool:
            state = self.lifecycle_state(record)
            by_status[state] = by_status.get(state, 0) + 1

        selected = [r for r in pool if include(r)] if include is not None else pool

        by_group: dict[str, int] = {}
        if group_field:
            for record in selected:
                group = record.get(group_field)
                if group is None:
                    continue
                by_group[str(group)] = by_group.get(str(group), 0) + 1

        sums = {name: sum(amount(r.get(name)) for r in selected) for name in sum_fields}
        averages = {
            name: (sum(amount(r.get(name)) for r in selected) / len(selected)) if selected else 0
            for name in average_fields
        }

        return {
            "total": len(pool),
            "byStatus": by_status,
            "byGroup": by_group,
            "sums": sums,
            "averages": averages,
            "considered": len(selected),
        }
