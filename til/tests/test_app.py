import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from til.app import create_app
from til.db import DataStoreError, InMemoryDbClient
from til.dependencies import get_db_client

SOURCE = "https://example.com/source"


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient(seed_demo_facts=True)
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.client = TestClient(self.app)

    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "store": "InMemoryDbClient"})

    def test_categories(self):
        response = self.client.get("/api/categories")
        self.assertEqual(response.status_code, 200)
        categories = response.json()["categories"]
        self.assertEqual(len(categories), 8)
        self.assertEqual(categories[0], {"name": "technology", "color": "#3b82f6"})

    def test_list_facts_uses_wire_names(self):
        response = self.client.get("/api/facts")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["count"], 3)
        self.assertEqual(payload["category"], "all")
        first = payload["facts"][0]
        self.assertEqual(first["votesInteresting"], 24)
        self.assertEqual(first["createdIn"], 2021)
        self.assertFalse(first["disputed"])

    def test_list_facts_filtered_and_ordered(self):
        response = self.client.get(
            "/api/facts", params={"category": "society", "order_by": "mindblowing"}
        )
        payload = response.json()
        self.assertEqual(payload["category"], "society")
        self.assertEqual(
            [fact["votesMindblowing"] for fact in payload["facts"]], [3, 2]
        )

    def test_list_facts_unknown_category(self):
        response = self.client.get("/api/facts", params={"category": "sports"})
        self.assertEqual(response.status_code, 422)
        response = self.client.get("/api/facts", params={"order_by": "boring"})
        self.assertEqual(response.status_code, 422)

    def test_create_fact(self):
        response = self.client.post(
            "/api/facts",
            json={"text": "Honey never spoils", "source": SOURCE, "category": "science"},
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["id"], 4)
        self.assertEqual(payload["votesFalse"], 0)
        self.assertIsNotNone(payload["createdIn"])
        self.assertEqual(self.client.get("/api/facts/4").json()["text"], "Honey never spoils")

    def test_create_fact_validation(self):
        bad_payloads = [
            {"text": "", "source": SOURCE, "category": "science"},
            {"text": "   ", "source": SOURCE, "category": "science"},
            {"text": "x" * 201, "source": SOURCE, "category": "science"},
            {"text": "ok", "source": "ftp://example.com", "category": "science"},
            {"text": "ok", "source": "https://exa mple.com", "category": "science"},
            {"text": "ok", "source": SOURCE, "category": ""},
            {"text": "ok", "source": SOURCE},
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                response = self.client.post("/api/facts", json=payload)
                self.assertEqual(response.status_code, 422)
        self.assertEqual(len(self.db.list_facts()), 3)

    def test_vote(self):
        response = self.client.post("/api/facts/3/vote", json={"column": "false"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["votesFalse"], 2)
        response = self.client.post(
            "/api/facts/3/vote", json={"column": "votesInteresting"}
        )
        self.assertEqual(response.json()["votesInteresting"], 9)

    def test_vote_errors(self):
        response = self.client.post("/api/facts/999/vote", json={"column": "false"})
        self.assertEqual(response.status_code, 404)
        response = self.client.post("/api/facts/1/vote", json={"column": "boring"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.client.get("/api/facts/999").status_code, 404)

    def test_disputed_flag(self):
        for _ in range(2):
            self.client.post("/api/facts/3/vote", json={"column": "false"})
        fact = self.client.get("/api/facts/3").json()
        self.assertEqual(fact["votesFalse"], 3)
        self.assertFalse(fact["disputed"])
        for _ in range(9):
            self.client.post("/api/facts/3/vote", json={"column": "false"})
        self.assertTrue(self.client.get("/api/facts/3").json()["disputed"])

    def test_store_failure_maps_to_502(self):
        db = MagicMock()
        db.list_facts.side_effect = DataStoreError("down")
        self.app.dependency_overrides[get_db_client] = lambda: db
        response = self.client.get("/api/facts")
        self.assertEqual(response.status_code, 502)
        self.assertIn("unavailable", response.json()["detail"])

    def test_store_failure_on_create_and_vote_maps_to_502(self):
        db = MagicMock()
        db.create_fact.side_effect = DataStoreError("down")
        db.increment_vote.side_effect = DataStoreError("down", status_code=503)
        self.app.dependency_overrides[get_db_client] = lambda: db

        response = self.client.post(
            "/api/facts",
            json={"text": "Honey never spoils", "source": SOURCE, "category": "science"},
        )
        self.assertEqual(response.status_code, 502)
        self.assertIn("unavailable", response.json()["detail"])

        response = self.client.post("/api/facts/1/vote", json={"column": "false"})
        self.assertEqual(response.status_code, 502)
        self.assertIn("unavailable", response.json()["detail"])


if __name__ == "__main__":
    unittest.main()
