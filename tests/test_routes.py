"""
Tests for campfire/src/api/routes.py
HTTP contract of the search endpoint, with fakes behind a real SearchSession.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeChatModel, FakeVectorStore

from campfire.src.core.models import VectorHit
from campfire.src.main import create_app


@pytest.fixture
def client(make_session, catalog, embedder):
    session = make_session(catalog, FakeVectorStore(), embedder, FakeChatModel(answer="Tent time!"))
    with TestClient(create_app(session=session)) as test_client:
        yield test_client


class TestSearchEndpoint:

    def test_returns_answer_and_products(self, client):
        response = client.get("/api/aisearch/tent for two")

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Tent time!"
        assert body["products"][0]["id"] == 1
        assert body["products"][0]["name"] == "Tent"

    def test_fallback_is_still_a_200(self, make_session, catalog, embedder):
        store = FakeVectorStore(hits=[VectorHit("1", 0.05)])
        session = make_session(catalog, store, embedder, FakeChatModel())

        with TestClient(create_app(session=session)) as client:
            response = client.get("/api/aisearch/bicycles")

        assert response.status_code == 200
        assert response.json() == {"response": "I don't know the answer for your question. Your question is: [bicycles]", "products": []}


class TestHealthEndpoint:

    def test_reports_index_state(self, client):
        before = client.get("/health").json()
        client.get("/api/aisearch/tent")
        after = client.get("/health").json()

        assert before == {"status": "ok", "index_state": "unindexed"}
        assert after == {"status": "ok", "index_state": "ready"}
