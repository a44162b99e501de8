"""
API tests — the FastAPI routes end to end through TestClient.
"""

import pytest
from fastapi.testclient import TestClient

from app.controllers.quotation_controller import (
    _get_counter_store,
    _get_quotation_service,
)
from app.main import _cors_origins, app, run
from app.repository.counter_repository import InMemoryCounterStore, JsonFileCounterStore
from app.services.pdf_service import PdfService
from app.services.quotation_service import QuotationService


class _FailingPdfService(PdfService):
    def serialize(self, pages, title="", author=""):
        raise OSError("no space left on device")


@pytest.fixture
def client():
    store = InMemoryCounterStore()
    app.dependency_overrides[_get_counter_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestMeta:
    def test_health(self, client):
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/docs"

    def test_run_serves_with_uvicorn(self, monkeypatch):
        calls = []
        monkeypatch.setattr("app.main.uvicorn.run", lambda target, **kw: calls.append((target, kw)))
        monkeypatch.setenv("QUOTEFORGE_PORT", "9100")
        run()
        assert calls[0][0] == "app.main:app"
        assert calls[0][1]["port"] == 9100

    def test_cors_origins_from_env(self, monkeypatch):
        monkeypatch.setenv("QUOTEFORGE_CORS_ORIGINS", "https://a.example, https://b.example,")
        assert _cors_origins() == ["https://a.example", "https://b.example"]


class TestQuoteNumber:
    def test_sequence(self, client):
        first = client.post("/api/v1/quote-number", json={"date": "2026-10-19"})
        second = client.post("/api/v1/quote-number", json={"date": "2026-10-19"})
        assert first.json() == {"quoteNumber": "Q-20261019-001"}
        assert second.json() == {"quoteNumber": "Q-20261019-002"}

    def test_broken_counter_file_is_a_server_error(self, tmp_path):
        path = tmp_path / "counters.json"
        path.write_text('{"quote_counter_2026-10-19": "x"}')
        app.dependency_overrides[_get_counter_store] = lambda: JsonFileCounterStore(path)
        with TestClient(app) as c:
            r = c.post("/api/v1/quote-number", json={"date": "2026-10-19"})
        app.dependency_overrides.clear()
        assert r.status_code == 500

    def test_bad_date(self, client):
        r = client.post("/api/v1/quote-number", json={"date": "tomorrow"})
        assert r.status_code == 400


class TestQuotations:
    def test_totals(self, client, base_payload):
        r = client.post("/api/v1/quotations/totals", json=base_payload)
        assert r.json() == {"subtotal": 200, "vatAmount": 15, "grandTotal": 225}

    def test_render(self, client, base_payload):
        r = client.post("/api/v1/quotations/render", json=base_payload)
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert r.headers["x-page-count"] == "1"
        assert 'filename="Q-20261019-001.pdf"' in r.headers["content-disposition"]
        assert r.content.startswith(b"%PDF")

    def test_render_failure_maps_to_500(self, client, base_payload):
        app.dependency_overrides[_get_quotation_service] = lambda: QuotationService(
            pdf_service=_FailingPdfService()
        )
        r = client.post("/api/v1/quotations/render", json=base_payload)
        assert r.status_code == 500
        assert r.json()["detail"] == "Document generation failed"

    @pytest.mark.parametrize("fmt,media", [
        ("csv", "text/csv"),
        ("json", "application/json"),
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    ])
    def test_exports(self, client, base_payload, fmt, media):
        r = client.post(f"/api/v1/quotations/export/{fmt}", json=base_payload)
        assert r.status_code == 200
        assert r.headers["content-type"].startswith(media)
        assert f'filename="Q-20261019-001.{fmt}"' in r.headers["content-disposition"]

    @pytest.mark.parametrize("path", ["render", "export/csv", "export/json", "export/xlsx"])
    def test_non_latin1_quote_number(self, client, base_payload, path):
        payload = {**base_payload, "quoteNumber": "Q-₦-001\r\nX-Injected: 1"}
        r = client.post(f"/api/v1/quotations/{path}", json=payload)
        assert r.status_code == 200
        assert "x-injected" not in r.headers
        assert 'filename="Q--001X-Injected 1.' in r.headers["content-disposition"]

    def test_unknown_export_format(self, client, base_payload):
        r = client.post("/api/v1/quotations/export/docx", json=base_payload)
        assert r.status_code == 400
