"""
Tests for the instance store accessor: joined fetch, degraded multi-fetch,
error classification and cache publication.
"""

import asyncio

import pytest

from practiceboard.application.services import InstanceCache, InstanceStoreAccessor
from practiceboard.domain.exceptions import (
    AssessmentConfigurationError,
    FetchFailedError,
    StoreError,
    StoreErrorKind,
)
from practiceboard.tests.helpers import OTHER_THERAPIST_ID, THERAPIST_ID

RECURSION = StoreError(
    "infinite recursion detected in policy for relation \"profiles\"",
    kind=StoreErrorKind.RECURSION,
)
TRANSIENT = StoreError("connection reset by peer", kind=StoreErrorKind.TRANSIENT)


@pytest.fixture
def cache(clock):
    return InstanceCache(clock=clock)


@pytest.fixture
def accessor(store, cache):
    return InstanceStoreAccessor(store, cache)


@pytest.fixture
def seeded(store, make_instance):
    instances = [
        make_instance(template_id="tpl_1", client_id="c1"),
        make_instance(template_id="tpl_2", client_id="c2"),
        make_instance(template_id="tpl_1", client_id="c3"),
        make_instance(template_id="tpl_1", client_id="c1", therapist_id=OTHER_THERAPIST_ID),
    ]
    for instance in instances:
        store.add_instance(instance)
    return instances


class TestListInstances:
    @pytest.mark.asyncio
    async def test_joined_fetch_used_when_available(self, accessor, store, seeded):
        """The single joined query answers when it succeeds."""
        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert [i.id for i in instances] == ["inst_3", "inst_2", "inst_1"]
        assert instances[0].client.display_name == "pat@example.com"
        assert instances[1].template.name == "GAD-7 (Generalized Anxiety Disorder)"
        assert store.calls == ["fetch_instances_with_relations"]

    @pytest.mark.asyncio
    async def test_fallback_matches_joined_result(self, accessor, store, seeded):
        """Degraded multi-fetch composes the same list as the joined query."""
        joined = await accessor.list_instances_for_therapist(THERAPIST_ID)

        store.fail_on("fetch_instances_with_relations", RECURSION)
        degraded = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert degraded == joined
        assert "fetch_instances" in store.calls
        assert "fetch_templates_by_ids" in store.calls
        assert "fetch_clients_by_ids" in store.calls

    @pytest.mark.asyncio
    async def test_fallback_on_transient_error(self, accessor, store, seeded):
        store.fail_on("fetch_instances_with_relations", TRANSIENT)

        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert len(instances) == 3

    @pytest.mark.asyncio
    async def test_dangling_references_resolve_to_none(self, accessor, store, make_instance):
        """Instances whose template or client row is gone are kept, unresolved."""
        store.add_instance(make_instance(template_id="tpl_deleted", client_id="c_deleted"))
        store.fail_on("fetch_instances_with_relations", RECURSION)

        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert len(instances) == 1
        assert instances[0].template is None
        assert instances[0].client is None

    @pytest.mark.asyncio
    async def test_empty_result_skips_lookups(self, accessor, store):
        store.fail_on("fetch_instances_with_relations", RECURSION)

        assert await accessor.list_instances_for_therapist(THERAPIST_ID) == []
        assert "fetch_templates_by_ids" not in store.calls
        assert "fetch_clients_by_ids" not in store.calls

    @pytest.mark.asyncio
    async def test_failed_lookup_degrades_to_unresolved(self, accessor, store, seeded):
        store.fail_on("fetch_instances_with_relations", RECURSION)
        store.fail_on("fetch_clients_by_ids", TRANSIENT)

        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert all(i.client is None for i in instances)
        assert all(i.template is not None for i in instances)

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self, accessor, store, seeded):
        """Template and client lookups are in flight together, not one after the other."""
        store.fail_on("fetch_instances_with_relations", RECURSION)
        barrier = asyncio.Barrier(2)
        fetch_templates = store.fetch_templates_by_ids
        fetch_clients = store.fetch_clients_by_ids

        async def templates_after_barrier(ids):
            await barrier.wait()
            return await fetch_templates(ids)

        async def clients_after_barrier(ids):
            await barrier.wait()
            return await fetch_clients(ids)

        store.fetch_templates_by_ids = templates_after_barrier
        store.fetch_clients_by_ids = clients_after_barrier

        instances = await asyncio.wait_for(
            accessor.list_instances_for_therapist(THERAPIST_ID), timeout=1
        )

        assert len(instances) == 3
        assert all(i.template is not None and i.client is not None for i in instances)

    @pytest.mark.asyncio
    async def test_unexpected_joined_error_falls_back(self, accessor, store, seeded):
        store.fail_on(
            "fetch_instances_with_relations", ValueError("'bogus' is not a valid InstanceStatus")
        )

        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert len(instances) == 3
        assert "fetch_instances" in store.calls

    @pytest.mark.asyncio
    async def test_recursion_on_both_fetches_is_configuration_error(self, accessor, store, seeded):
        store.fail_on("fetch_instances_with_relations", RECURSION)
        store.fail_on("fetch_instances", RECURSION)

        with pytest.raises(AssessmentConfigurationError) as exc_info:
            await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert exc_info.value.retryable is False
        assert "contact support" in exc_info.value.user_message

    @pytest.mark.asyncio
    async def test_transient_bare_fetch_failure_is_fetch_failed(self, accessor, store, seeded):
        store.fail_on("fetch_instances_with_relations", TRANSIENT)
        store.fail_on("fetch_instances", TRANSIENT)

        with pytest.raises(FetchFailedError) as exc_info:
            await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, store, cache, seeded):
        async def hang(therapist_id):
            await asyncio.sleep(5)

        store.fetch_instances_with_relations = hang
        accessor = InstanceStoreAccessor(store, cache, timeout=0.05)

        instances = await accessor.list_instances_for_therapist(THERAPIST_ID)

        assert len(instances) == 3


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_publishes_to_cache(self, accessor, cache, seeded):
        instances = await accessor.refresh(THERAPIST_ID)

        assert cache.instances == instances
        assert cache.therapist_id == THERAPIST_ID
        assert cache.error is None
        assert cache.version == 1
        assert not cache.loading

    @pytest.mark.asyncio
    async def test_refresh_records_configuration_error_with_empty_list(
        self, accessor, cache, store, seeded
    ):
        """Circular policy: the list is empty and the error is kept for display."""
        await accessor.refresh(THERAPIST_ID)
        store.fail_on("fetch_instances_with_relations", RECURSION)
        store.fail_on("fetch_instances", RECURSION)

        result = await accessor.refresh(THERAPIST_ID)

        assert result == []
        assert cache.instances == []
        assert isinstance(cache.error, AssessmentConfigurationError)
        assert not cache.loading

    @pytest.mark.asyncio
    async def test_next_successful_refresh_clears_error(self, accessor, cache, store, seeded):
        store.fail_on("fetch_instances_with_relations", TRANSIENT)
        store.fail_on("fetch_instances", TRANSIENT)
        await accessor.refresh(THERAPIST_ID)
        assert isinstance(cache.error, FetchFailedError)

        store.clear_failures()
        await accessor.refresh(THERAPIST_ID)

        assert cache.error is None
        assert len(cache.instances) == 3

    @pytest.mark.asyncio
    async def test_stale_fetch_for_previous_therapist_is_discarded(
        self, accessor, cache, store, seeded
    ):
        gate = asyncio.Event()
        original = store.fetch_instances_with_relations

        async def gated(therapist_id):
            if therapist_id == THERAPIST_ID:
                await gate.wait()
            return await original(therapist_id)

        store.fetch_instances_with_relations = gated

        slow = asyncio.create_task(accessor.refresh(THERAPIST_ID))
        await asyncio.sleep(0)
        await accessor.refresh(OTHER_THERAPIST_ID)
        gate.set()
        await slow

        assert cache.therapist_id == OTHER_THERAPIST_ID
        assert [i.therapist_id for i in cache.instances] == [OTHER_THERAPIST_ID]
