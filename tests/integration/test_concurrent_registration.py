"""
Integration tests for concurrent archiver registration.

Tests cover:
- Unique ids across threads with independent connections
- Default names bound to the id each caller actually received
- Mixed registrations and removals on one database
"""

import tempfile
from concurrent.futures import ThreadPoolExecutor

import pytest

from failover_monitor.metadata.archiver_store import ArchiverStore


class TestConcurrentRegistration:
    """Concurrent use of one monitor database."""

    WORKERS = 8
    PER_WORKER = 25

    @pytest.fixture
    def data_dir(self):
        """Create temporary data directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    @pytest.fixture
    def data_store(self, data_dir):
        store = ArchiverStore(data_dir, busy_timeout_ms=30000)
        store.initialize()
        return store

    def _register_many(self, data_dir: str, worker: int) -> list[int]:
        # Each worker gets its own store, as separate callers would
        store = ArchiverStore(data_dir, busy_timeout_ms=30000)
        ids = []
        for i in range(self.PER_WORKER):
            name = None if i % 2 == 0 else f"worker{worker}_{i}"
            ids.append(store.add_archiver(name, f"10.{worker}.0.{i}"))
        return ids

    def test_concurrent_adds_get_unique_ids(self, data_dir, data_store):
        """No two concurrent registrations share an id."""
        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            futures = [
                pool.submit(self._register_many, data_dir, worker)
                for worker in range(self.WORKERS)
            ]
            results = [future.result() for future in futures]

        all_ids = [node_id for ids in results for node_id in ids]
        total = self.WORKERS * self.PER_WORKER

        assert len(all_ids) == total
        assert len(set(all_ids)) == total

        archivers = data_store.list_archivers()
        assert len(archivers) == total
        assert {a.node_id for a in archivers} == set(all_ids)

    def test_concurrent_default_names_match_ids(self, data_dir, data_store):
        """Every defaulted name carries the id of its own row."""
        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            list(pool.map(lambda w: self._register_many(data_dir, w), range(self.WORKERS)))

        archivers = data_store.list_archivers()
        defaulted = [a for a in archivers if not a.node_name.startswith("worker")]

        assert len(defaulted) == self.WORKERS * ((self.PER_WORKER + 1) // 2)
        for archiver in defaulted:
            assert archiver.node_name == f"archiver_{archiver.node_id}"

        names = [a.node_name for a in defaulted]
        assert len(set(names)) == len(names)

    def test_removals_during_registration(self, data_dir, data_store):
        """Removing archivers while others register never recycles ids."""
        seed_ids = [data_store.add_archiver(None, "10.9.9.9") for _ in range(20)]

        def remove_all() -> None:
            store = ArchiverStore(data_dir, busy_timeout_ms=30000)
            for node_id in seed_ids:
                store.remove_archiver(node_id)

        with ThreadPoolExecutor(max_workers=self.WORKERS) as pool:
            remover = pool.submit(remove_all)
            adders = [
                pool.submit(self._register_many, data_dir, worker)
                for worker in range(self.WORKERS - 1)
            ]
            remover.result()
            new_ids = [node_id for future in adders for node_id in future.result()]

        assert min(new_ids) > max(seed_ids)
        assert all(data_store.get_archiver(node_id) is None for node_id in seed_ids)
        assert len(data_store.list_archivers()) == len(new_ids)
