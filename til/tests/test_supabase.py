import unittest
from unittest.mock import MagicMock

import requests

from til.db import DataStoreError
from til.facts import VoteColumn
from til.supabase import SupabaseDbClient

ROW = {
    "id": 3,
    "text": "Lisbon is the capital of Portugal",
    "source": "https://en.wikipedia.org/wiki/Lisbon",
    "category": "society",
    "votesInteresting": 8,
    "votesMindblowing": 3,
    "votesFalse": 1,
    "createdIn": 2015,
}


def make_response(payload, status_code=200):
    response = MagicMock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.text = str(payload)
    response.json.return_value = payload
    return response


class SupabaseDbClientTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.session.headers = {}
        self.client = SupabaseDbClient(
            url="https://project.supabase.co/",
            api_key="anon-key",
            session=self.session,
            timeout=5,
        )

    def last_call(self):
        args, kwargs = self.session.request.call_args
        return args, kwargs

    def test_sets_auth_headers(self):
        self.assertEqual(self.session.headers["apikey"], "anon-key")
        self.assertEqual(self.session.headers["Authorization"], "Bearer anon-key")
        self.assertEqual(
            self.client.endpoint, "https://project.supabase.co/rest/v1/facts"
        )

    def test_requires_url_and_key(self):
        with self.assertRaises(ValueError):
            SupabaseDbClient(url="", api_key="k", session=MagicMock())

    def test_list_facts_all(self):
        self.session.request.return_value = make_response([ROW])
        facts = self.client.list_facts()
        self.assertEqual(facts[0].id, 3)
        args, kwargs = self.last_call()
        self.assertEqual(args, ("GET", "https://project.supabase.co/rest/v1/facts"))
        self.assertEqual(
            kwargs["params"], {"select": "*", "order": "votesInteresting.desc"}
        )
        self.assertEqual(kwargs["timeout"], 5)

    def test_list_facts_filtered_and_ordered(self):
        self.session.request.return_value = make_response([])
        self.client.list_facts(category="science", order_by=VoteColumn.FALSE)
        _, kwargs = self.last_call()
        self.assertEqual(kwargs["params"]["category"], "eq.science")
        self.assertEqual(kwargs["params"]["order"], "votesFalse.desc")

    def test_create_fact_returns_server_row(self):
        created = dict(ROW, id=41, votesInteresting=0, votesMindblowing=0, votesFalse=0, createdIn=2026)
        self.session.request.return_value = make_response([created], status_code=201)
        fact = self.client.create_fact("text", "https://example.com", "society")
        self.assertEqual(fact.id, 41)
        self.assertEqual(fact.created_in, 2026)
        args, kwargs = self.last_call()
        self.assertEqual(args[0], "POST")
        self.assertEqual(
            kwargs["json"],
            [{"text": "text", "source": "https://example.com", "category": "society"}],
        )
        self.assertEqual(kwargs["headers"], {"Prefer": "return=representation"})

    def test_increment_vote_with_client_value(self):
        self.session.request.return_value = make_response([dict(ROW, votesFalse=2)])
        fact = self.client.increment_vote(3, VoteColumn.FALSE, current=1)
        self.assertEqual(fact.votes_false, 2)
        self.assertEqual(self.session.request.call_count, 1)
        args, kwargs = self.last_call()
        self.assertEqual(args[0], "PATCH")
        self.assertEqual(kwargs["params"]["id"], "eq.3")
        self.assertEqual(kwargs["json"], {"votesFalse": 2})

    def test_increment_vote_reads_current_value_first(self):
        self.session.request.side_effect = [
            make_response([ROW]),
            make_response([dict(ROW, votesInteresting=9)]),
        ]
        fact = self.client.increment_vote(3, VoteColumn.INTERESTING)
        self.assertEqual(fact.votes_interesting, 9)
        _, kwargs = self.last_call()
        self.assertEqual(kwargs["json"], {"votesInteresting": 9})

    def test_increment_vote_unknown_fact(self):
        self.session.request.return_value = make_response([])
        self.assertIsNone(self.client.increment_vote(99, VoteColumn.FALSE))
        self.assertIsNone(self.client.increment_vote(99, VoteColumn.FALSE, current=0))

    def test_http_error_raises_data_store_error(self):
        self.session.request.return_value = make_response(
            {"message": "boom"}, status_code=500
        )
        with self.assertRaises(DataStoreError) as ctx:
            self.client.list_facts()
        self.assertEqual(ctx.exception.status_code, 500)

    def test_transport_error_raises_data_store_error(self):
        self.session.request.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(DataStoreError):
            self.client.create_fact("t", "https://example.com", "news")

    def test_malformed_rows_raise_data_store_error(self):
        self.session.request.return_value = make_response([{"id": 1}])
        with self.assertRaises(DataStoreError):
            self.client.list_facts()
        self.session.request.return_value = make_response({"not": "a list"})
        with self.assertRaises(DataStoreError):
            self.client.list_facts()


if __name__ == "__main__":
    unittest.main()
