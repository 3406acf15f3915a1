"""Tests for the invalidation trigger."""

import pytest

from querycache.cache import ChangeEvent

QUERY = "SELECT id FROM posts ORDER BY created DESC LIMIT 5 OFFSET 0"


async def prime(context, query=QUERY, ids=(5, 2, 9)):
    scope = context.new_scope()
    await context.query_cache.lookup(scope, query)
    await context.query_cache.prime_on_miss(scope, list(ids))


class TestOnDataChanged:
    @pytest.mark.asyncio
    async def test_previous_entries_become_unreachable(self, context, store):
        await prime(context)
        old_entries = dict(store.data)

        assert await context.trigger.on_data_changed() is True

        assert await context.query_cache.lookup(context.new_scope(), QUERY) is None
        # Old entries are still physically present.
        for key, value in old_entries.items():
            if key[0] != "main:cache_incrementors":
                assert store.data[key] == value

    @pytest.mark.asyncio
    async def test_advances_by_exactly_one(self, context, store):
        await context.trigger.on_data_changed(ChangeEvent(object_type="post", object_id=4))

        assert store.generation() == 1700000001

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event",
        [
            ChangeEvent(object_type="post", object_id=4, preview=True),
            ChangeEvent(object_type="post", object_id=4, autosave=True),
        ],
    )
    async def test_preview_and_autosave_are_ignored(self, context, store, event):
        assert await context.trigger.on_data_changed(event) is False
        assert store.generation() == 1700000000

    @pytest.mark.asyncio
    async def test_other_process_sees_invalidation(self, context, store, hydrator, settings):
        from querycache.cache import CacheContext

        other = CacheContext(store, hydrator, tenant_id="main", settings=settings)
        await prime(context)
        assert await context.query_cache.lookup(context.new_scope(), QUERY) == [5, 2, 9]

        await other.trigger.on_data_changed()

        assert await context.query_cache.lookup(context.new_scope(), QUERY) is None

    @pytest.mark.asyncio
    async def test_lookup_after_wraparound_is_a_miss(self, context, store):
        store.data[("main:cache_incrementors", "query_cache")] = 9999999999
        await prime(context)
        assert await context.query_cache.lookup(context.new_scope(), QUERY) == [5, 2, 9]

        assert await context.trigger.on_data_changed() is True

        assert store.generation() == 0
        assert context.tracker.group == "query_cache_0"
        assert await context.query_cache.lookup(context.new_scope(), QUERY) is None

    @pytest.mark.asyncio
    async def test_failed_generation_read_does_not_resurrect_old_entries(self, context, store):
        await prime(context)
        await context.trigger.on_data_changed()
        store.fail_gets = True

        assert await context.query_cache.lookup(context.new_scope(), QUERY) is None
        assert context.tracker.generation == 1700000001
        assert store.generation() == 1700000001

        store.fail_gets = False
        assert await context.query_cache.lookup(context.new_scope(), QUERY) is None
        assert context.tracker.generation == 1700000001


class TestSuppression:
    @pytest.mark.asyncio
    async def test_suppressed_changes_do_not_advance(self, context, store):
        context.trigger.suppress()
        for _ in range(5):
            assert await context.trigger.on_data_changed() is False
        context.trigger.unsuppress()

        assert store.generation() == 1700000000

        assert await context.trigger.on_data_changed() is True
        assert store.generation() == 1700000001

    @pytest.mark.asyncio
    async def test_nested_suppression_counts_depth(self, context, store):
        context.trigger.suppress()
        context.trigger.suppress()
        context.trigger.unsuppress()

        assert context.trigger.is_suppressed
        assert await context.trigger.on_data_changed() is False

        context.trigger.unsuppress()
        assert await context.trigger.on_data_changed() is True

    @pytest.mark.asyncio
    async def test_forced_unsuppress_reenables_fully(self, context):
        context.trigger.suppress()
        context.trigger.suppress()
        context.trigger.unsuppress(force=True)

        assert not context.trigger.is_suppressed
        assert await context.trigger.on_data_changed() is True

    def test_unsuppress_never_goes_negative(self, context):
        context.trigger.unsuppress()

        assert context.trigger.suppress_depth == 0

    @pytest.mark.asyncio
    async def test_scope_guard_releases_on_error(self, context):
        with pytest.raises(RuntimeError):
            with context.trigger.suppressed():
                assert await context.trigger.on_data_changed() is False
                raise RuntimeError("boom")

        assert not context.trigger.is_suppressed

    @pytest.mark.asyncio
    async def test_count_maintenance_bracket(self, context, store):
        context.trigger.begin_count_maintenance()
        await context.trigger.on_data_changed()
        context.trigger.end_count_maintenance()

        assert store.generation() == 1700000000


class TestCoalescing:
    @pytest.mark.asyncio
    async def test_repeated_signals_collapse(self, context, store):
        with context.trigger.coalescing():
            assert await context.trigger.on_data_changed() is True
            assert await context.trigger.on_data_changed() is False
            assert await context.trigger.on_data_changed() is False

        assert store.generation() == 1700000001

    @pytest.mark.asyncio
    async def test_priming_rearms_flush(self, context, store):
        with context.trigger.coalescing():
            await context.trigger.on_data_changed()
            await prime(context)
            assert await context.trigger.on_data_changed() is True

        assert store.generation() == 1700000002

    @pytest.mark.asyncio
    async def test_each_batch_flushes_once(self, context, store):
        for _ in range(2):
            with context.trigger.coalescing():
                await context.trigger.on_data_changed()
                await context.trigger.on_data_changed()

        assert store.generation() == 1700000002

    @pytest.mark.asyncio
    async def test_without_batch_every_signal_flushes(self, context, store):
        await context.trigger.on_data_changed()
        await context.trigger.on_data_changed()

        assert store.generation() == 1700000002
