import json
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from kontainar.services.collection_store import (
    CollectionStore,
    FilterSpec,
    FlagPairSoftDelete,
    StatusSoftDelete,
    UniqueField,
    resolve_path,
)
from kontainar.validation import DuplicateKeyError, NotFoundError


def make_store(storage, clock, **options):
    options.setdefault("seed", [])
    return CollectionStore(storage, "things", clock=clock, **options)


class TestPersistence:
    def test_absent_key_loads_empty(self, storage, clock):
        store = make_store(storage, clock)
        assert store.load_all() == []
        assert store.exists() is False

    def test_initialize_writes_seed_once(self, storage, clock):
        store = make_store(storage, clock, seed=lambda: [{"id": "a", "name": "Alpha"}])
        store.initialize()
        assert store.load_all() == [{"id": "a", "name": "Alpha"}]

        store.save_all([{"id": "b", "name": "Beta"}])
        store.initialize()
        assert [r["id"] for r in store.load_all()] == ["b"]

    def test_initialize_keeps_empty_stored_list(self, storage, clock):
        store = make_store(storage, clock, seed=[{"id": "a"}])
        store.save_all([])
        store.initialize()
        assert store.load_all() == []

    def test_save_all_stores_json_array(self, storage, clock):
        store = make_store(storage, clock)
        store.save_all([{"id": "a", "tags": ["x"]}])
        assert json.loads(storage.get_item("things")) == [{"id": "a", "tags": ["x"]}]

    @pytest.mark.parametrize("raw", ["{not json", '{"id": "a"}', '[1, 2]', '"text"'])
    def test_malformed_blob_reads_as_empty(self, storage, clock, caplog, raw):
        storage.set_item("things", raw)
        store = make_store(storage, clock)
        with caplog.at_level(logging.WARNING, logger="kontainar.services.collection_store"):
            assert store.load_all() == []
        assert "Ignoring unreadable collection" in caplog.text


class TestCreate:
    def test_assigns_id_and_timestamps(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create({"name": "Alpha"})

        assert created["id"]
        assert created["createdAt"] == created["updatedAt"]
        assert created["createdAt"].endswith(".000Z")
        assert store.load_all() == [created]

    def test_caller_cannot_choose_id(self, storage, clock):
        store = make_store(storage, clock, id_factory=lambda: "generated")
        created = store.create({"id": "mine", "name": "Alpha"})
        assert created["id"] == "generated"

    def test_append_and_prepend(self, storage, clock):
        appended = make_store(storage, clock)
        appended.create({"name": "first"})
        appended.create({"name": "second"})
        assert [r["name"] for r in appended.load_all()] == ["first", "second"]

        prepended = CollectionStore(storage, "newest-first", prepend=True, clock=clock)
        prepended.create({"name": "first"})
        prepended.create({"name": "second"})
        assert [r["name"] for r in prepended.load_all()] == ["second", "first"]

    def test_merge_order_defaults_data_overrides(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create(
            {"status": "custom", "rating": 5},
            defaults={"status": "active", "tags": []},
            overrides={"rating": 0},
        )
        assert created["status"] == "custom"
        assert created["tags"] == []
        assert created["rating"] == 0

    def test_duplicate_unique_field_is_case_insensitive(self, storage, clock):
        store = make_store(storage, clock, unique_fields=(UniqueField("email", case_insensitive=True, label="Email"),))
        store.create({"email": "a@example.com"})

        with pytest.raises(DuplicateKeyError) as excinfo:
            store.create({"email": "  A@Example.COM "})

        assert excinfo.value.field_name == "email"
        assert "already exists" in str(excinfo.value)
        assert len(store.load_all()) == 1

    def test_case_sensitive_unique_field(self, storage, clock):
        store = make_store(storage, clock, unique_fields=(UniqueField("code"),))
        store.create({"code": "ABC"})
        store.create({"code": "abc"})
        with pytest.raises(DuplicateKeyError):
            store.create({"code": "ABC"})

    def test_missing_unique_value_is_not_checked(self, storage, clock):
        store = make_store(storage, clock, unique_fields=(UniqueField("sku"),))
        store.create({"name": "no sku"})
        store.create({"name": "still no sku", "sku": ""})
        assert len(store.load_all()) == 2

    def test_fresh_id_retries_on_collision(self, storage, clock):
        ids = iter(["taken", "taken", "free"])
        store = make_store(storage, clock, id_factory=lambda: next(ids))
        store.save_all([{"id": "taken"}])

        assert store.create({"name": "new"})["id"] == "free"

    def test_fresh_id_gives_up(self, storage, clock):
        store = make_store(storage, clock, id_factory=lambda: "taken")
        store.save_all([{"id": "taken"}])
        with pytest.raises(RuntimeError):
            store.create({"name": "new"})


class TestUpdate:
    def test_update_merges_and_bumps_updated_at(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create({"name": "Alpha", "qty": 1})

        updated = store.update(created["id"], {"qty": 2, "id": "other", "createdAt": "never"})

        assert updated["id"] == created["id"]
        assert updated["createdAt"] == created["createdAt"]
        assert updated["qty"] == 2
        assert updated["name"] == "Alpha"
        assert updated["updatedAt"] > created["updatedAt"]
        assert store.find_by_id(created["id"]) == updated

    def test_update_replaces_nested_objects(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create({"address": {"city": "Cairo", "zip": "1"}})
        updated = store.update(created["id"], {"address": {"city": "Giza"}})
        assert updated["address"] == {"city": "Giza"}

    def test_update_missing_record(self, storage, clock):
        store = make_store(storage, clock)
        with pytest.raises(NotFoundError):
            store.update("missing", {"name": "x"})

    def test_update_uniqueness_excludes_self(self, storage, clock):
        store = make_store(storage, clock, unique_fields=(UniqueField("name", case_insensitive=True),))
        alpha = store.create({"name": "Alpha"})
        beta = store.create({"name": "Beta"})

        store.update(alpha["id"], {"name": "ALPHA"})
        with pytest.raises(DuplicateKeyError):
            store.update(beta["id"], {"name": "alpha"})

    def test_modify_many_persists_once_and_only_changed(self, storage, clock):
        store = make_store(storage, clock)
        a = store.create({"n": 1})
        b = store.create({"n": 2})

        def _double_first(records):
            records[0]["n"] *= 2
            return [records[0]["id"]]

        assert store.modify_many(_double_first) == [a["id"]]
        by_id = {r["id"]: r for r in store.load_all()}
        assert by_id[a["id"]]["n"] == 2
        assert by_id[a["id"]]["updatedAt"] > a["updatedAt"]
        assert by_id[b["id"]] == b


class TestLifecycle:
    def test_status_soft_delete_and_restore(self, storage, clock):
        store = make_store(storage, clock, soft_delete=StatusSoftDelete("status"))
        created = store.create({"status": "inactive"})

        deleted = store.soft_delete(created["id"])
        assert deleted["status"] == "deleted"
        assert deleted["deletedAt"]

        restored = store.restore(created["id"])
        assert restored["status"] == "active"
        assert restored["deletedAt"] is None
        assert store.lifecycle_state(restored) == "active"

    def test_flag_pair_soft_delete_and_restore(self, storage, clock):
        store = make_store(storage, clock, soft_delete=FlagPairSoftDelete())
        created = store.create({"isActive": True, "isDeleted": False})

        deleted = store.soft_delete(created["id"])
        assert (deleted["isActive"], deleted["isDeleted"]) == (False, True)
        assert store.lifecycle_state(deleted) == "deleted"

        restored = store.restore(created["id"])
        assert (restored["isActive"], restored["isDeleted"]) == (True, False)
        assert restored["deletedAt"] is None

    def test_flag_pair_inactive_state(self):
        policy = FlagPairSoftDelete()
        assert policy.state({"isActive": False, "isDeleted": False}) == "inactive"

    def test_soft_delete_missing_record(self, storage, clock):
        store = make_store(storage, clock, soft_delete=StatusSoftDelete())
        with pytest.raises(NotFoundError):
            store.soft_delete("missing")

    def test_soft_delete_requires_policy(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create({"name": "Alpha"})
        with pytest.raises(TypeError):
            store.soft_delete(created["id"])

    def test_permanent_delete_is_idempotent(self, storage, clock):
        store = make_store(storage, clock)
        created = store.create({"name": "Alpha"})
        kept = store.create({"name": "Beta"})

        assert store.permanent_delete(created["id"]) is True
        assert store.permanent_delete(created["id"]) is True
        assert store.permanent_delete("never-existed") is True
        assert store.load_all() == [kept]


class TestSearchAndFilter:
    @pytest.fixture
    def store(self, storage, clock):
        store = make_store(storage, clock)
        store.save_all([
            {"id": "1", "name": "Red Shirt", "qty": 42, "tags": ["cotton", "summer"], "price": 20,
             "items": [{"productName": "Collar"}]},
            {"id": "2", "name": "Blue Jeans", "qty": 7, "tags": ["denim"], "price": 60,
             "items": [{"productName": "Button"}]},
            {"id": "3", "name": "red cap", "qty": 0, "tags": [], "price": 10, "items": []},
        ])
        return store

    @pytest.mark.parametrize("query", [None, "", "   "])
    def test_blank_query_returns_everything(self, store, query):
        assert [r["id"] for r in store.search(query, ("name",))] == ["1", "2", "3"]

    def test_search_is_case_insensitive(self, store):
        assert [r["id"] for r in store.search("RED", ("name",))] == ["1", "3"]

    def test_search_matches_list_elements_and_nested_paths(self, store):
        assert [r["id"] for r in store.search("denim", ("tags",))] == ["2"]
        assert [r["id"] for r in store.search("button", ("items.productName",))] == ["2"]

    def test_search_matches_numbers_against_raw_query(self, store):
        assert [r["id"] for r in store.search("42", ("qty",))] == ["1"]

    def test_resolve_path_fans_out(self):
        record = {"items": [{"sku": "A"}, {"sku": "B"}, {"other": 1}]}
        assert resolve_path(record, "items.sku") == ["A", "B"]

    def test_equals_all_disables_filter(self, store):
        spec = FilterSpec(equals={"name": "all"})
        assert len(store.filter_by(spec)) == 3

    def test_range_is_inclusive(self, store):
        spec = FilterSpec(ranges={"price": (10, 20)})
        assert [r["id"] for r in store.filter_by(spec)] == ["1", "3"]

    def test_any_of_intersects_lists(self, store):
        spec = FilterSpec(any_of={"tags": ["summer", "denim"]})
        assert [r["id"] for r in store.filter_by(spec)] == ["1", "2"]

    def test_sort_orders(self, store):
        assert [r["id"] for r in store.filter_by(FilterSpec(sort_by="price-high"))] == ["2", "1", "3"]
        assert [r["id"] for r in store.filter_by(FilterSpec(sort_by="name"))] == ["2", "3", "1"]

    def test_unknown_sort_keeps_stored_order(self, store):
        assert [r["id"] for r in store.filter_by(FilterSpec(sort_by="bogus"))] == ["1", "2", "3"]


class TestStats:
    def test_totals_match_collection(self, storage, clock):
        store = make_store(storage, clock, soft_delete=StatusSoftDelete())
        store.save_all([
            {"id": "1", "status": "active", "kind": "a", "amount": 10},
            {"id": "2", "status": "deleted", "kind": "b", "amount": 5},
            {"id": "3", "status": "active", "kind": "a", "amount": "n/a"},
            {"id": "4"},
        ])

        stats = store.stats(group_field="kind", sum_fields=("amount",), average_fields=("amount",))

        assert stats["total"] == len(store.load_all())
        assert sum(stats["byStatus"].values()) == stats["total"]
        assert stats["byStatus"] == {"active": 2, "deleted": 1, "unknown": 1}
        assert stats["byGroup"] == {"a": 2, "b": 1}
        assert stats["sums"]["amount"] == 15

    def test_include_narrows_aggregates_only(self, storage, clock):
        store = make_store(storage, clock, soft_delete=StatusSoftDelete())
        store.save_all([
            {"id": "1", "status": "active", "rating": 4},
            {"id": "2", "status": "suspended", "rating": 2},
        ])
        stats = store.stats(average_fields=("rating",), include=lambda r: r["status"] == "active")
        assert stats["total"] == 2
        assert stats["averages"]["rating"] == 4

    def test_empty_collection_is_zero_safe(self, storage, clock):
        store = make_store(storage, clock)
        stats = store.stats(sum_fields=("x",), average_fields=("x",))
        assert stats["total"] == 0
        assert stats["averages"]["x"] == 0


class TestKeyLock:
    def test_concurrent_modify_keeps_every_increment(self, slow_storage, clock):
        store = make_store(slow_storage, clock, seed=[{"id": "c", "count": 0}])
        store.initialize()

        def _bump(record):
            record["count"] += 1

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: store.modify("c", _bump), range(8)))

        assert store.get("c")["count"] == 8

    def test_concurrent_creates_all_persist(self, slow_storage, clock):
        store = make_store(slow_storage, clock)

        with ThreadPoolExecutor(max_workers=6) as pool:
            created = list(pool.map(lambda n: store.create({"name": f"item-{n}"}), range(6)))

        stored = store.load_all()
        assert len(stored) == 6
        assert {r["id"] for r in stored} == {r["id"] for r in created}
