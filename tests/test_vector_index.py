import tempfile
import threading
import unittest
from pathlib import Path

from domain.entities import Chunk
from domain.errors import DimensionMismatch
from domain.similarity import cosine_similarity
from infrastructure.storage.in_memory_vector_index import InMemoryVectorIndex
from infrastructure.storage.sqlite_vector_index import SqliteVectorIndex


def make_chunk(chunk_id: str, tenant_id: str, embedding: list[float] | None, *, index: int = 0) -> Chunk:
    return Chunk(
        id=chunk_id,
        document_id=f"doc-{tenant_id}",
        tenant_id=tenant_id,
        content=f"content of {chunk_id}",
        chunk_index=index,
        embedding=embedding,
        metadata={"source": f"{tenant_id}/source.md"},
    )


class TestCosineSimilarity(unittest.TestCase):
    def test_identical_vectors(self):
        self.assertAlmostEqual(cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]), 1.0)

    def test_opposite_vectors(self):
        self.assertAlmostEqual(cosine_similarity([1.0, 2.0], [-1.0, -2.0]), -1.0)

    def test_orthogonal_vectors(self):
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [0.0, 1.0]), 0.0)

    def test_zero_vector_scores_zero(self):
        self.assertEqual(cosine_similarity([0.0, 0.0], [1.0, 1.0]), 0.0)

    def test_length_mismatch_raises(self):
        with self.assertRaises(DimensionMismatch) as ctx:
            cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])
        self.assertEqual((ctx.exception.expected, ctx.exception.actual), (2, 3))


class VectorIndexContract:
    """Behaviour shared by every VectorIndex implementation."""

    def make_index(self):
        raise NotImplementedError

    def setUp(self) -> None:
        self.index = self.make_index()

    def test_search_empty_tenant_returns_empty(self):
        self.assertEqual(self.index.search([1.0, 0.0], "nobody", 3), [])

    def test_search_sorted_descending_and_limited(self):
        self.index.upsert(
            [
                make_chunk("far", "t1", [0.0, 1.0]),
                make_chunk("near", "t1", [1.0, 0.1]),
                make_chunk("middle", "t1", [1.0, 1.0]),
            ]
        )
        results = self.index.search([1.0, 0.0], "t1", 2)
        self.assertEqual([result.chunk.id for result in results], ["near", "middle"])
        self.assertGreater(results[0].score, results[1].score)

    def test_ties_keep_insertion_order(self):
        self.index.upsert([make_chunk(name, "t1", [1.0, 0.0]) for name in ("a", "b", "c")])
        results = self.index.search([2.0, 0.0], "t1", 3)
        self.assertEqual([result.chunk.id for result in results], ["a", "b", "c"])

    def test_search_is_tenant_scoped(self):
        self.index.upsert(
            [
                make_chunk("mine", "t1", [0.5, 0.5]),
                make_chunk("theirs", "t2", [1.0, 0.0]),
            ]
        )
        results = self.index.search([1.0, 0.0], "t1", 10)
        self.assertEqual([result.chunk.id for result in results], ["mine"])
        self.assertTrue(all(result.chunk.tenant_id == "t1" for result in results))

    def test_chunks_without_embedding_are_skipped(self):
        self.index.upsert([make_chunk("bare", "t1", None), make_chunk("full", "t1", [1.0, 0.0])])
        results = self.index.search([1.0, 0.0], "t1", 5)
        self.assertEqual([result.chunk.id for result in results], ["full"])

    def test_dimension_mismatch_is_raised(self):
        self.index.upsert([make_chunk("c", "t1", [1.0, 0.0, 0.0])])
        with self.assertRaises(DimensionMismatch):
            self.index.search([1.0, 0.0], "t1", 1)

    def test_upsert_replaces_by_id(self):
        self.index.upsert([make_chunk("c", "t1", [0.0, 1.0])])
        self.index.upsert([make_chunk("c", "t1", [1.0, 0.0])])
        results = self.index.search([1.0, 0.0], "t1", 5)
        self.assertEqual(len(results), 1)
        self.assertAlmostEqual(results[0].score, 1.0)
        self.assertEqual(self.index.stats().total_chunks, 1)

    def test_upsert_assigns_missing_ids(self):
        chunk = make_chunk("", "t1", [1.0, 0.0])
        self.index.upsert([chunk])
        self.assertTrue(chunk.id)

    def test_delete_ids_and_ignore_unknown(self):
        self.index.upsert([make_chunk("a", "t1", [1.0, 0.0]), make_chunk("b", "t1", [1.0, 0.0])])
        self.index.delete(["a", "missing"])
        results = self.index.search([1.0, 0.0], "t1", 5)
        self.assertEqual([result.chunk.id for result in results], ["b"])
        self.assertEqual(self.index.stats().chunks_by_tenant, {"t1": 1})

    def test_delete_by_tenant_returns_count(self):
        self.index.upsert(
            [
                make_chunk("a", "t1", [1.0, 0.0]),
                make_chunk("b", "t1", [1.0, 0.0]),
                make_chunk("c", "t2", [1.0, 0.0]),
            ]
        )
        self.assertEqual(self.index.delete_by_tenant("t1"), 2)
        self.assertEqual(self.index.delete_by_tenant("t1"), 0)
        self.assertEqual(self.index.search([1.0, 0.0], "t1", 5), [])
        self.assertEqual(len(self.index.search([1.0, 0.0], "t2", 5)), 1)

    def test_stats_and_clear(self):
        self.index.upsert(
            [
                make_chunk("a", "t1", [1.0, 0.0]),
                make_chunk("b", "t2", [1.0, 0.0]),
                make_chunk("c", "t2", [1.0, 0.0]),
            ]
        )
        stats = self.index.stats()
        self.assertEqual(stats.total_chunks, 3)
        self.assertEqual(stats.tenant_count, 2)
        self.assertEqual(stats.chunks_by_tenant, {"t1": 1, "t2": 2})
        self.index.clear()
        self.assertEqual(self.index.stats().total_chunks, 0)

    def test_search_keeps_metadata(self):
        self.index.upsert([make_chunk("a", "t1", [1.0, 0.0])])
        result = self.index.search([1.0, 0.0], "t1", 1)[0]
        self.assertEqual(result.chunk.metadata, {"source": "t1/source.md"})
        self.assertEqual(result.chunk.content, "content of a")


class TestInMemoryVectorIndex(VectorIndexContract, unittest.TestCase):
    def make_index(self):
        return InMemoryVectorIndex()

    def test_concurrent_batches_are_never_torn(self):
        batch_size = 50
        errors: list[str] = []

        def writer(prefix: str) -> None:
            for round_number in range(20):
                self.index.upsert(
                    [make_chunk(f"{prefix}-{round_number}-{i}", "t1", [1.0, 0.0]) for i in range(batch_size)]
                )

        def reader() -> None:
            for _ in range(50):
                count = len(self.index.search([1.0, 0.0], "t1", 10_000))
                if count % batch_size:
                    errors.append(f"observed partial batch: {count}")

        threads = [threading.Thread(target=writer, args=(name,)) for name in ("w1", "w2")]
        threads.append(threading.Thread(target=reader))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(self.index.stats().total_chunks, 2 * 20 * batch_size)

    def test_moving_chunk_between_tenants_updates_membership(self):
        self.index.upsert([make_chunk("c", "t1", [1.0, 0.0])])
        self.index.upsert([make_chunk("c", "t2", [1.0, 0.0])])
        self.assertEqual(self.index.search([1.0, 0.0], "t1", 5), [])
        self.assertEqual(self.index.stats().chunks_by_tenant, {"t2": 1})


class TestSqliteVectorIndex(VectorIndexContract, unittest.TestCase):
    def make_index(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        return SqliteVectorIndex(db_path=Path(self._tmp.name) / "tenantsearch.db")

    def test_reopened_index_sees_previous_chunks(self):
        self.index.upsert([make_chunk("a", "t1", [1.0, 0.0])])
        reopened = SqliteVectorIndex(db_path=Path(self._tmp.name) / "tenantsearch.db")
        self.assertEqual([result.chunk.id for result in reopened.search([1.0, 0.0], "t1", 1)], ["a"])


if __name__ == "__main__":
    unittest.main()
