import importlib.util
import os
import unittest
from unittest import mock

from infrastructure.config import ContainerConfig, build_default_container
from infrastructure.embedding.hash_embedder import HashEmbedder


@unittest.skipIf(
    importlib.util.find_spec("fastapi") is None or importlib.util.find_spec("httpx") is None,
    "fastapi or httpx not installed",
)
class TestKnowledgeApi(unittest.TestCase):
    prefix = "/api/v1/knowledge"

    def setUp(self) -> None:
        from fastapi.testclient import TestClient
        from ui.api.main import create_app

        with mock.patch.dict(os.environ, {"TENANTSEARCH_LOG_FILE": ""}):
            self.container = build_default_container(ContainerConfig(embedding_provider="hash"))
            self.client = TestClient(create_app(self.container))

    def _ingest(self, tenant_id: str, **overrides):
        document = {
            "title": "Returns policy",
            "content": "Items can be returned within 14 days if unopened.",
            "source": "faq/returns.md",
            "type": "faq",
        }
        document.update(overrides)
        return self.client.post(f"{self.prefix}/ingest", json={"tenantId": tenant_id, "documents": [document]})

    def test_ingest_and_search(self):
        response = self._ingest("tenant-a")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Ingested 1 documents, 0 failed")
        self.assertEqual(body["results"][0]["status"], "success")
        self.assertGreater(body["results"][0]["chunksCreated"], 0)

        response = self.client.post(
            f"{self.prefix}/search",
            json={"query": "Items can be returned within 14 days if unopened.", "tenantId": "tenant-a"},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["results"][0]["source"], "faq/returns.md")
        self.assertAlmostEqual(body["results"][0]["relevanceScore"], 1.0)

    def test_ingest_validation_error_is_400(self):
        response = self._ingest("tenant-a", title="")
        self.assertEqual(response.status_code, 400)
        self.assertIn("title", response.json()["error"])

        response = self.client.post(f"{self.prefix}/ingest", json={"tenantId": "tenant-a", "documents": []})
        self.assertEqual(response.status_code, 400)

    def test_search_validation_error_is_400(self):
        response = self.client.post(f"{self.prefix}/search", json={"query": "", "tenantId": "tenant-a"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "query is required and must be a string")

    def test_search_with_high_threshold_returns_empty(self):
        self._ingest("tenant-a")
        response = self.client.post(
            f"{self.prefix}/search",
            json={"query": "unrelated question", "tenantId": "tenant-a", "minScore": 0.99},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"results": [], "count": 0})

    def test_documents_and_deletion(self):
        document_id = self._ingest("tenant-a").json()["results"][0]["documentId"]

        listing = self.client.get(f"{self.prefix}/documents/tenant-a").json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["documents"][0]["id"], document_id)
        self.assertEqual(listing["documents"][0]["tenantId"], "tenant-a")

        self.assertEqual(self.client.delete(f"{self.prefix}/documents/tenant-b/{document_id}").status_code, 404)
        self.assertEqual(self.client.delete(f"{self.prefix}/documents/tenant-a/{document_id}").status_code, 200)
        self.assertEqual(self.client.get(f"{self.prefix}/documents/tenant-a").json()["count"], 0)

    def test_delete_tenant_and_stats(self):
        self._ingest("tenant-a")
        self._ingest("tenant-b")

        stats = self.client.get(f"{self.prefix}/stats").json()
        self.assertEqual(stats["totalDocuments"], 2)
        self.assertEqual(stats["vectorStoreStats"]["tenantCount"], 2)
        self.assertEqual(stats["embedding"]["provider"], "none")

        response = self.client.delete(f"{self.prefix}/documents/tenant-a")
        self.assertEqual(response.json()["deletedCount"], 1)
        stats = self.client.get(f"{self.prefix}/stats").json()
        self.assertEqual(stats["vectorStoreStats"]["chunksByTenant"], {"tenant-b": 1})

    def test_stats_reports_plain_embedder(self):
        self.container.embedder = HashEmbedder()
        stats = self.client.get(f"{self.prefix}/stats").json()
        self.assertEqual(stats["embedding"], {"provider": "local", "model": "simple-fallback", "available": True})


if __name__ == "__main__":
    unittest.main()
