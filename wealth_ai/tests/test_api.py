from __future__ import annotations

import math
import os
from dataclasses import dataclass, field

import httpx
import pytest

os.environ["WEALTH_LLM_PROVIDER"] = "groq"
os.environ["GROQ_API_KEY"] = "test-key"

from wealth_ai.app import dependencies
from wealth_ai.app.main import app
from wealth_ai.rag.advisor import FALLBACK_REPLY
from wealth_ai.rag.llm import LLMError

pytestmark = pytest.mark.anyio


@dataclass
class StubClient:
    reply: str = "Here is a plan."
    fail: bool = False
    calls: list[list[dict[str, str]]] = field(default_factory=list)

    async def complete(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.fail:
            raise LLMError("Chat API error: 502 - bad gateway")
        return self.reply


@pytest.fixture
def stub_client(monkeypatch: pytest.MonkeyPatch) -> StubClient:
    client = StubClient()
    monkeypatch.setattr(dependencies, "build_client", lambda: client)
    dependencies.reset_caches()
    yield client
    dependencies.reset_caches()


def get_client() -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=app)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


async def test_health_endpoint() -> None:
    async with get_client() as client:
        response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


async def test_calculator_endpoints(stub_client: StubClient) -> None:
    async with get_client() as client:
        tax = await client.post(
            "/calculators/tax", json={"gross_income": "760000", "total_deductions": None}
        )
        sip = await client.post(
            "/calculators/sip", json={"monthly_amount": 5000, "years": 10, "annual_return_pct": 0}
        )
        emi = await client.post(
            "/calculators/emi", json={"loan_amount": 120000, "annual_rate_pct": "", "years": 1}
        )
        fd = await client.post(
            "/calculators/fd", json={"principal": 100000, "annual_rate_pct": 10, "years": 1}
        )
    assert tax.status_code == 200
    assert tax.json()["tax"] == pytest.approx(27000)
    assert tax.json()["monthly_tax"] == pytest.approx(2250)
    assert sip.json()["maturity_amount"] == pytest.approx(600000)
    assert sip.json()["total_gains"] == pytest.approx(0)
    assert emi.json()["emi"] == pytest.approx(10000)
    assert fd.json() == pytest.approx({"maturity_amount": 110000, "interest": 10000})


@pytest.mark.parametrize(
    ("path", "payload"),
    [
        ("/calculators/fd", {"principal": 1000, "annual_rate_pct": 10, "years": "1e10"}),
        ("/calculators/fd", {"principal": 100, "annual_rate_pct": -250, "years": 1.5}),
        ("/calculators/sip", {"monthly_amount": 1000, "years": "1e300", "annual_return_pct": 12}),
        ("/calculators/sip", {"monthly_amount": 1000, "years": 1, "annual_return_pct": "1e-15"}),
        ("/calculators/emi", {"loan_amount": 100000, "annual_rate_pct": "1e-15", "years": 1}),
        ("/calculators/emi", {"loan_amount": 100000, "annual_rate_pct": 12, "years": "1e300"}),
    ],
)
async def test_calculators_handle_extreme_input(
    stub_client: StubClient, path: str, payload: dict[str, object]
) -> None:
    async with get_client() as client:
        response = await client.post(path, json=payload)
    assert response.status_code == 200
    values = response.json().values()
    assert all(isinstance(value, float) and math.isfinite(value) for value in values)


async def test_metrics_count_calculations(stub_client: StubClient) -> None:
    async with get_client() as client:
        await client.post("/calculators/fd", json={"principal": 1000, "annual_rate_pct": 5})
        response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'calculator_requests_total{kind="fd"}' in response.text


async def test_knowledge_endpoints(stub_client: StubClient) -> None:
    async with get_client() as client:
        listing = await client.get("/knowledge")
        item = await client.get("/knowledge/tax-planning-guide")
        missing = await client.get("/knowledge/does-not-exist")
        search = await client.get("/knowledge/search", params={"q": "80c"})
        empty = await client.get("/knowledge/search", params={"q": ""})
        context = await client.get("/knowledge/context", params={"q": "retirement corpus"})
        no_context = await client.get("/knowledge/context", params={"q": "xyzzyplugh"})

    assert [entry["id"] for entry in listing.json()] == [
        "tax-planning-guide",
        "investment-strategies",
        "retirement-planning",
        "expense-management",
    ]
    assert item.json()["keywords"] == ["tax", "planning", "80c", "deduction", "savings"]
    assert missing.status_code == 404
    assert "tax-planning-guide" in [entry["id"] for entry in search.json()]
    assert empty.json() == []
    assert "Retirement Planning:" in context.json()["context"]
    assert no_context.json()["context"] == ""


async def test_document_add_search_remove(stub_client: StubClient) -> None:
    async with get_client() as client:
        added = await client.post(
            "/documents",
            json={"documents": [{"id": "a", "name": "x", "content": "tax tips"}]},
        )
        assert added.status_code == 200
        assert added.json()["added"] == 1

        found = await client.get("/documents/search", params={"q": "tax"})
        assert [doc["id"] for doc in found.json()] == ["a"]

        removed = await client.delete("/documents/a")
        assert removed.json() == {"removed": 1}

        again = await client.delete("/documents/a")
        assert again.json() == {"removed": 0}

        found = await client.get("/documents/search", params={"q": "tax"})
    assert found.json() == []


async def test_document_ids_are_generated(stub_client: StubClient) -> None:
    async with get_client() as client:
        response = await client.post(
            "/documents",
            json={
                "documents": [
                    {"name": "one.txt", "content": "first"},
                    {"name": "two.txt", "content": "second"},
                ]
            },
        )
        listing = await client.get("/documents")
    ids = [doc["id"] for doc in response.json()["documents"]]
    assert len(set(ids)) == 2
    assert [doc["id"] for doc in listing.json()] == ids


async def test_upload_analyzes_and_rejects(stub_client: StubClient) -> None:
    files = [
        (
            "files",
            (
                "form16.txt",
                b"Form 16\nEmployer: Acme Corp\nGross Salary: 9,00,000\nTDS: 45,000\n",
                "text/plain",
            ),
        ),
        ("files", ("photo.png", b"\x89PNG\r\n", "image/png")),
        ("files", ("empty.txt", b"", "text/plain")),
    ]
    async with get_client() as client:
        response = await client.post("/documents/files", files=files)
        stats = await client.get("/stats")

    assert response.status_code == 200
    payload = response.json()
    assert payload["added"] == 1
    document = payload["documents"][0]
    assert document["type"] == "text/plain"
    assert document["analysis"]["document_type"] == "form16"
    assert document["analysis"]["fields"]["gross_salary"] == 900000
    assert document["analysis"]["insights"][0] == "Your effective tax rate is 5.0%"
    assert [item["name"] for item in payload["rejected"]] == ["photo.png", "empty.txt"]
    assert stats.json() == {"knowledge_count": 4, "document_count": 1}


async def test_chat_grounds_and_tracks_history(stub_client: StubClient) -> None:
    async with get_client() as client:
        first = await client.post("/chat", json={"message": "Explain 80C limits"})
        second = await client.post(
            "/chat", json={"message": "And for my parents?", "use_knowledge": False}
        )
        reset = await client.post("/chat/reset")
        third = await client.post("/chat", json={"message": "Start over", "use_knowledge": False})

    assert first.status_code == 200
    body = first.json()
    assert body["answer"] == "Here is a plan."
    assert body["grounded"] is True
    assert "Tax Planning Guide" in body["context"]
    assert body["request_id"]
    assert len(second.json()["history"]) == 4
    assert reset.json() == {"reset": True}
    assert len(third.json()["history"]) == 2
    assert stub_client.calls[0][-1]["content"].startswith("Context:\n")


async def test_quick_action(stub_client: StubClient) -> None:
    async with get_client() as client:
        response = await client.post("/chat/quick-action", json={"action": "emi-planning"})
    assert response.status_code == 200
    assert response.json()["grounded"] is False
    assert stub_client.calls[0][-1]["content"].startswith("Explain EMI planning")


async def test_chat_falls_back_when_model_fails(stub_client: StubClient) -> None:
    stub_client.fail = True
    async with get_client() as client:
        response = await client.post("/chat", json={"message": "Plan my SIP"})
    assert response.status_code == 200
    assert response.json()["answer"] == FALLBACK_REPLY
    assert response.json()["error"] == "llm_error"


async def test_chat_unavailable_without_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail():
        raise LLMError("GROQ_API_KEY is required for groq provider")

    monkeypatch.setattr(dependencies, "build_client", _fail)
    dependencies.reset_caches()
    try:
        async with get_client() as client:
            response = await client.post("/chat", json={"message": "hello"})
    finally:
        dependencies.reset_caches()
    assert response.status_code == 503
