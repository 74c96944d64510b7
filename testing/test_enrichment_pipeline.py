"""Tests for the fetch, enrich and write-back pipeline."""

import pytest

from core.stores import PaginationDivergenceError
from core.task_queue import QueueConfig
from jobs.shared import BatchWrite, EnrichmentPipeline

FAST = QueueConfig(concurrency=5, retry_count=2)


class _Store:
    """In-memory document store recording every write batch."""

    def __init__(self, documents: list[dict]):
        self.documents = {doc["id"]: dict(doc) for doc in documents}
        self.batches: list[list[dict]] = []

    async def fetch(self) -> list[dict]:
        return [dict(doc) for doc in self.documents.values()]

    async def write(self, batch: list[dict]) -> None:
        self.batches.append(batch)
        for update in batch:
            self.documents[update["id"]].update(update)


async def _add_category(document: dict):
    if document.get("category") == "news":
        return None
    return {"id": document["id"], "category": "news"}


def _pipeline(store: _Store, **kwargs) -> EnrichmentPipeline:
    options = {
        "name": "add-category",
        "fetch_candidates": store.fetch,
        "enrich": _add_category,
        "write_batch": store.write,
        "enrich_config": FAST,
        "write_config": FAST,
    }
    options.update(kwargs)
    return EnrichmentPipeline(**options)


class TestEnrichmentPipeline:

    async def test_only_changed_items_are_written(self):
        store = _Store([
            {"id": "a", "category": "news"},
            {"id": "b", "category": "news"},
            {"id": "c"},
        ])

        report = await _pipeline(store).run()

        assert report.processed == 3
        assert report.updated == 1
        assert report.unchanged == 2
        assert report.failed == 0
        assert report.write_batches == 1
        assert store.batches == [[{"id": "c", "category": "news"}]]

    async def test_writes_are_chunked(self):
        store = _Store([{"id": f"doc-{i}"} for i in range(250)])

        report = await _pipeline(store).run()

        assert [len(batch) for batch in sorted(store.batches, key=len, reverse=True)] == [100, 100, 50]
        assert report.write_batches == 3
        assert report.updated == 250

    async def test_enrich_failures_are_attributed(self):
        store = _Store([{"id": f"doc-{i}"} for i in range(10)])

        async def enrich(document: dict):
            if document["id"] in ("doc-3", "doc-7"):
                raise ConnectionError(f"cannot load {document['id']}")
            return await _add_category(document)

        report = await _pipeline(store, enrich=enrich).run()

        assert report.processed == 10
        assert report.updated == 8
        assert report.failed == 2
        assert sorted(f.item_id for f in report.failures) == ["doc-3", "doc-7"]
        assert {f.stage for f in report.failures} == {"enrich"}
        assert "ConnectionError" in report.failures[0].error
        written = {update["id"] for batch in store.batches for update in batch}
        assert written.isdisjoint({"doc-3", "doc-7"})
        assert report.counted == report.processed

    async def test_second_run_writes_nothing(self):
        store = _Store([{"id": "a"}, {"id": "b"}])

        await _pipeline(store).run()
        report = await _pipeline(store).run()

        assert report.updated == 0
        assert report.unchanged == 2
        assert report.write_batches == 0
        assert len(store.batches) == 1

    async def test_fetch_failure_writes_nothing(self):
        store = _Store([{"id": "a"}])

        async def diverging_fetch():
            raise PaginationDivergenceError("did not converge", max_pages=3, pages_fetched=3)

        with pytest.raises(PaginationDivergenceError):
            await _pipeline(store, fetch_candidates=diverging_fetch).run()

        assert store.batches == []

    async def test_no_candidates(self):
        store = _Store([])

        report = await _pipeline(store).run()

        assert report.processed == 0
        assert report.write_batches == 0
        assert store.batches == []

    async def test_write_failure_counts_whole_chunk(self):
        store = _Store([{"id": f"doc-{i}"} for i in range(5)])

        async def write(batch: list[dict]):
            if any(update["id"] == "doc-0" for update in batch):
                raise RuntimeError("engine unavailable")
            await store.write(batch)

        report = await _pipeline(store, write_batch=write, batch_size=2).run()

        assert report.write_batches == 3
        assert report.failed == 2
        assert report.updated == 3
        assert {f.item_id for f in report.failures} == {"doc-0", "doc-1"}
        assert {f.stage for f in report.failures} == {"write"}
        assert report.failures[0].error == "RuntimeError: engine unavailable"
        assert report.counted == report.processed

    async def test_write_count_from_writer(self):
        store = _Store([{"id": "a"}, {"id": "b"}, {"id": "c"}])

        async def write(batch: list[dict]) -> int:
            return 1

        report = await _pipeline(store, write_batch=write).run()

        assert report.processed == 3
        assert report.updated == 1
        assert report.skipped == 2
        assert report.unchanged == 0
        assert report.failed == 0
        assert report.counted == report.processed

    async def test_batch_write_breakdown(self):
        store = _Store([{"id": f"doc-{i}"} for i in range(5)] + [{"id": "done", "category": "news"}])

        async def write(batch: list[dict]) -> BatchWrite:
            return BatchWrite(written=2, unchanged=1, planned=1)

        report = await _pipeline(store, write_batch=write).run()

        assert report.processed == 6
        assert report.updated == 2
        assert report.unchanged == 2
        assert report.planned == 1
        assert report.skipped == 1
        assert report.counted == report.processed

    async def test_overcounting_writer_is_capped(self):
        store = _Store([{"id": "a"}, {"id": "b"}])

        async def write(batch: list[dict]) -> int:
            return 10

        report = await _pipeline(store, write_batch=write).run()

        assert report.updated == 2
        assert report.counted == report.processed

    async def test_retries_transient_enrich_errors(self):
        store = _Store([{"id": "a"}])
        calls = 0

        async def enrich(document: dict):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise TimeoutError("slow page")
            return await _add_category(document)

        report = await _pipeline(store, enrich=enrich).run()

        assert calls == 2
        assert report.updated == 1
        assert report.failed == 0

    async def test_report_to_dict(self):
        store = _Store([{"id": "a"}])

        report = (await _pipeline(store).run()).to_dict()

        assert report["name"] == "add-category"
        assert report["updated"] == 1
        assert report["failures"] == []

    def test_rejects_bad_batch_size(self):
        store = _Store([])
        with pytest.raises(ValueError):
            _pipeline(store, batch_size=0)
