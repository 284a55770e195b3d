"""Tests for the structured offline cache and offline search."""

import json
import math

import pytest

from app.services.cache import MAPPING, NAMESPACES, VERSIONS, CacheKey, OfflineCache
from linkie_client.schemas import MappingSearchIndex
from settings import OFFLINE_CACHE_PREFIX


def _index(classes=(), methods=(), fields=()) -> MappingSearchIndex:
    return MappingSearchIndex.model_validate(
        {"classes": list(classes), "methods": list(methods), "fields": list(fields)}
    )


def _names(entries) -> list[str]:
    return [e.name for e in entries]


@pytest.fixture
def block_index() -> MappingSearchIndex:
    return _index(
        classes=[
            {"name": "net/minecraft/class_2248", "mapped": "net/minecraft/block/Block"},
            {"name": "net/minecraft/class_1792", "mapped": "net/minecraft/item/Item"},
            {"name": "net/minecraft/class_2680", "mapped": "net/minecraft/block/BlockState"},
        ],
        methods=[{"name": "method_9564", "mapped": "getDefaultState", "owner": "net/minecraft/class_2248"}],
        fields=[{"name": "field_11146", "mapped": "BLOCK_STATE", "owner": "net/minecraft/class_2248"}],
    )


class TestSetGet:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("category", "data"),
        [
            (NAMESPACES, [{"id": "yarn", "versions": [{"version": "1.20", "stable": True}]}]),
            (VERSIONS, {"fabric": [{"version": "1.20", "stable": True, "blocks": {}}]}),
            (MAPPING, {"classes": [{"name": "A", "mapped": "B"}], "methods": [], "fields": []}),
            ("misc", {"anything": ["goes"]}),
        ],
    )
    async def test_round_trip(self, offline, category, data):
        await offline.set(category, "all", data)
        assert await offline.get(category, "all") == data

    @pytest.mark.asyncio
    async def test_missing_is_absent(self, offline):
        assert await offline.get(NAMESPACES, "all") is None

    @pytest.mark.asyncio
    async def test_invalid_namespaces_not_written(self, offline, repo):
        await offline.set(NAMESPACES, "all", {"id": "yarn"})
        assert await offline.get(NAMESPACES, "all") is None
        assert repo.list_keys() == []

    @pytest.mark.asyncio
    async def test_invalid_versions_not_written(self, offline, repo):
        await offline.set(VERSIONS, "all", {"fabric": "1.20"})
        assert repo.list_keys() == []

    @pytest.mark.asyncio
    async def test_malformed_cached_data_is_absent(self, offline, repo, clock):
        record = {"timestamp": clock.now, "data": {"not": "a list"}, "schemaVersion": 1}
        repo.set(CacheKey.of(NAMESPACES, "all").physical(OFFLINE_CACHE_PREFIX), json.dumps(record))
        assert await offline.get(NAMESPACES, "all") is None

    @pytest.mark.asyncio
    async def test_never_expires_by_age(self, offline, clock):
        await offline.set(NAMESPACES, "all", [])
        clock.advance(10 * 365 * 24 * 60 * 60)
        assert await offline.get(NAMESPACES, "all") == []

    @pytest.mark.asyncio
    async def test_schema_bump_invalidates(self, offline, repo, clock):
        await offline.set(NAMESPACES, "all", [])
        newer = OfflineCache(repo, schema_version=2, clock=clock)
        assert await newer.get(NAMESPACES, "all") is None

    @pytest.mark.asyncio
    async def test_clear_all_leaves_durable_records(self, offline, durable):
        await offline.set(NAMESPACES, "all", [])
        await durable.store("versions", {"fabric": []})
        await offline.clear_all()
        assert await offline.get(NAMESPACES, "all") is None
        assert await durable.retrieve("versions", max_age=math.inf) == {"fabric": []}


class TestMerge:
    @pytest.mark.asyncio
    async def test_merge_into_empty(self, offline, block_index):
        await offline.merge_search_index("yarn", "1.20", block_index)
        cached = await offline.get_search_index("yarn", "1.20")
        assert cached.classes == block_index.classes
        assert cached.methods == block_index.methods
        assert cached.fields == block_index.fields

    @pytest.mark.asyncio
    async def test_merge_appends_new_names(self, offline):
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "A", "mapped": "a"}]))
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "B", "mapped": "b"}]))
        cached = await offline.get_search_index("yarn", "1.20")
        assert _names(cached.classes) == ["A", "B"]

    @pytest.mark.asyncio
    async def test_merge_idempotent(self, offline, block_index):
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "Z", "mapped": "z"}]))
        once = await offline.merge_search_index("yarn", "1.20", block_index)
        twice = await offline.merge_search_index("yarn", "1.20", block_index)
        assert once == twice

    @pytest.mark.asyncio
    async def test_same_name_resolves_to_incoming_content(self, offline):
        await offline.merge_search_index(
            "yarn", "1.20", _index(classes=[{"name": "A", "mapped": "Y"}, {"name": "B", "mapped": "b"}])
        )
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "A", "mapped": "X"}]))

        cached = await offline.get_search_index("yarn", "1.20")
        assert [(e.name, e.mapped) for e in cached.classes] == [("A", "X"), ("B", "b")]

    @pytest.mark.asyncio
    async def test_existing_first_convention_would_drop_fresh_data(self, offline):
        # A keep-first dedup over existing + incoming would still say "Y" here.
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "A", "mapped": "Y"}]))
        merged = await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "A", "mapped": "X"}]))
        assert len(merged.classes) == 1
        assert merged.classes[0].mapped != "Y"

    @pytest.mark.asyncio
    async def test_duplicates_within_incoming_collapse(self, offline):
        incoming = _index(methods=[{"name": "m", "mapped": "first"}, {"name": "m", "mapped": "second"}])
        merged = await offline.merge_search_index("yarn", "1.20", incoming)
        assert [(e.name, e.mapped) for e in merged.methods] == [("m", "second")]

    @pytest.mark.asyncio
    async def test_collections_merge_independently(self, offline):
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "x", "mapped": "c"}]))
        merged = await offline.merge_search_index("yarn", "1.20", _index(fields=[{"name": "x", "mapped": "f"}]))
        assert _names(merged.classes) == ["x"]
        assert _names(merged.fields) == ["x"]

    @pytest.mark.asyncio
    async def test_extra_entry_fields_survive(self, offline):
        incoming = _index(fields=[{"name": "f", "mapped": "g", "owner": "o", "desc": "I"}])
        await offline.merge_search_index("yarn", "1.20", incoming)
        cached = await offline.get_search_index("yarn", "1.20")
        assert cached.fields[0].model_dump() == {"name": "f", "mapped": "g", "owner": "o", "desc": "I"}

    @pytest.mark.asyncio
    async def test_keys_are_per_namespace_and_version(self, offline, block_index):
        await offline.merge_search_index("yarn", "1.20", block_index)
        assert await offline.get_search_index("yarn", "1.19") is None
        assert await offline.get_search_index("mojang", "1.20") is None

    @pytest.mark.asyncio
    async def test_store_replaces_instead_of_merging(self, offline, block_index):
        await offline.merge_search_index("yarn", "1.20", _index(classes=[{"name": "old", "mapped": "o"}]))
        await offline.store_search_index("yarn", "1.20", block_index)
        cached = await offline.get_search_index("yarn", "1.20")
        assert _names(cached.classes) == _names(block_index.classes)


class TestSearchOffline:
    @pytest.mark.asyncio
    async def test_no_index_gives_empty_shaped_result(self, offline):
        result = await offline.search_offline("yarn", "1.20", "Block", True, True, True)
        assert result.model_dump() == {
            "classes": [],
            "methods": [],
            "fields": [],
            "entries": [],
            "fuzzy": False,
            "query": "Block",
        }

    @pytest.mark.asyncio
    async def test_case_insensitive_on_name_or_mapped(self, offline, block_index):
        await offline.store_search_index("yarn", "1.20", block_index)
        result = await offline.search_offline("yarn", "1.20", "block", True, True, True)
        assert _names(result.classes) == ["net/minecraft/class_2248", "net/minecraft/class_2680"]
        assert result.methods == []
        assert _names(result.fields) == ["field_11146"]

    @pytest.mark.asyncio
    async def test_matches_identity_key(self, offline, block_index):
        await offline.store_search_index("yarn", "1.20", block_index)
        result = await offline.search_offline("yarn", "1.20", "class_1792", True, True, True)
        assert _names(result.classes) == ["net/minecraft/class_1792"]

    @pytest.mark.asyncio
    async def test_empty_query_matches_everything(self, offline, block_index):
        await offline.store_search_index("yarn", "1.20", block_index)
        result = await offline.search_offline("yarn", "1.20", "", True, True, True)
        assert len(result.classes) == 3
        assert len(result.methods) == 1
        assert len(result.fields) == 1
        assert result.query == ""

    @pytest.mark.asyncio
    async def test_disabled_categories_are_empty(self, offline, block_index):
        await offline.store_search_index("yarn", "1.20", block_index)
        result = await offline.search_offline("yarn", "1.20", "", False, True, False)
        assert result.classes == []
        assert result.methods == []
        assert len(result.fields) == 1

    @pytest.mark.asyncio
    async def test_pattern_query(self, offline, block_index):
        await offline.store_search_index("yarn", "1.20", block_index)
        result = await offline.search_offline("yarn", "1.20", "Block$", True, False, False)
        assert _names(result.classes) == ["net/minecraft/class_2248"]

    @pytest.mark.asyncio
    async def test_invalid_pattern_matches_literally(self, offline):
        await offline.store_search_index("yarn", "1.20", _index(methods=[{"name": "m", "mapped": "get(Block"}]))
        result = await offline.search_offline("yarn", "1.20", "(block", True, True, True)
        assert _names(result.methods) == ["m"]

    @pytest.mark.asyncio
    async def test_missing_mapped_value(self, offline):
        await offline.store_search_index("yarn", "1.20", _index(classes=[{"name": "Unmapped"}]))
        result = await offline.search_offline("yarn", "1.20", "unm", True, True, True)
        assert _names(result.classes) == ["Unmapped"]
