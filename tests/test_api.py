"""Integration tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from serial_lookup_api.app.core.errors import UpstreamFetchError
from serial_lookup_api.app.main import create_app

from .helpers import FailingLogWriter, FakeDataSource, FakeGeoResolver


class TestBanner:
    @pytest.mark.parametrize("path", ["/", "/api"])
    def test_banner(self, client: TestClient, path: str) -> None:
        response = client.get(path)

        assert response.status_code == 200
        assert response.json() == {"message": "L'API fonctionne correctement"}
        assert response.headers["access-control-allow-origin"] == "*"

    def test_module_level_app_serves_banner(self) -> None:
        from serial_lookup_api.app.main import app

        assert TestClient(app).get("/api").status_code == 200


class TestGetDate:
    def test_found(self, client: TestClient) -> None:
        response = client.post("/api/getDate", json={"serial": "SN-001"})

        assert response.status_code == 200
        assert response.json() == {"status": "Success", "date": "2024-01-15"}

    def test_serial_is_trimmed(self, client: TestClient) -> None:
        response = client.post("/api/getDate", json={"serial": " SN-002 "})

        assert response.json() == {"status": "Success", "date": "2025-06-30"}

    def test_numeric_serial_is_looked_up_as_text(self, settings, geo_resolver, log_writer) -> None:
        source = FakeDataSource({"12345": "2023-03-09"})
        client = TestClient(create_app(settings, data_source=source, geo_resolver=geo_resolver, log_writer=log_writer))

        response = client.post("/api/getDate", json={"serial": 12345})

        assert response.status_code == 200
        assert response.json() == {"status": "Success", "date": "2023-03-09"}
        assert source.calls == ["12345"]

    def test_boolean_serial_is_rejected(self, client: TestClient, data_source: FakeDataSource) -> None:
        response = client.post("/api/getDate", json={"serial": True})

        assert response.status_code == 400
        assert data_source.calls == []

    def test_not_found(self, client: TestClient) -> None:
        response = client.post("/api/getDate", json={"serial": "SN-999"})

        assert response.status_code == 404
        assert response.json() == {"status": "None", "message": "Aucune date trouvée pour ce numéro de série"}

    @pytest.mark.parametrize(
        "kwargs",
        [
            {},
            {"json": {}},
            {"json": {"uuid": "User-Alice-Machine-PC7-Copy-3"}},
            {"json": {"serial": ""}},
            {"json": {"serial": "   "}},
            {"json": ["SN-001"]},
            {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
        ],
    )
    def test_missing_serial(self, client: TestClient, data_source: FakeDataSource, log_writer, kwargs) -> None:
        response = client.post("/api/getDate", **kwargs)

        assert response.status_code == 400
        assert response.json() == {"status": "Error", "message": "Numéro de série manquant"}
        assert data_source.calls == []
        assert log_writer.entries == []

    def test_upstream_fault(self, settings, geo_resolver, log_writer) -> None:
        source = FakeDataSource(error=UpstreamFetchError("CSV export unavailable"))
        client = TestClient(create_app(settings, data_source=source, geo_resolver=geo_resolver, log_writer=log_writer))

        response = client.post("/api/getDate", json={"serial": "SN-001"})

        assert response.status_code == 500
        assert response.json() == {"status": "Error", "message": "Erreur serveur"}
        assert log_writer.entries == []

    def test_unexpected_fault(self, settings, geo_resolver, log_writer) -> None:
        source = FakeDataSource(error=RuntimeError("kaboom"))
        client = TestClient(create_app(settings, data_source=source, geo_resolver=geo_resolver, log_writer=log_writer))

        response = client.post("/api/getDate", json={"serial": "SN-001"})

        assert response.status_code == 500
        assert response.json()["status"] == "Error"


class TestAccessLog:
    def test_found_lookup_is_logged(self, client: TestClient, log_writer) -> None:
        client.post(
            "/api/getDate",
            json={"serial": "SN-001", "uuid": "User-Alice-Machine-PC7-Copy-3"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        )

        [entry] = log_writer.entries
        assert (entry.user, entry.machine, entry.copy_index) == ("Alice", "PC7", 3)
        assert entry.client_ip == "203.0.113.7"
        assert (entry.country, entry.city) == ("France", "Lyon")
        assert (entry.serial, entry.result, entry.status) == ("SN-001", "2024-01-15", "Succès")

    def test_not_found_lookup_is_logged_as_failure(self, client: TestClient, log_writer) -> None:
        client.post("/api/getDate", json={"serial": "SN-999"})

        [entry] = log_writer.entries
        assert entry.serial == "SN-999"
        assert entry.result == "Échec"
        assert entry.status == "Échec"

    def test_peer_address_used_without_forwarding_header(self, client: TestClient, geo_resolver, log_writer) -> None:
        client.post("/api/getDate", json={"serial": "SN-001"})

        assert geo_resolver.calls == ["testclient"]
        assert log_writer.entries[0].client_ip == "testclient"

    def test_repeated_requests_append_one_row_each(self, client: TestClient, log_writer) -> None:
        for _ in range(3):
            assert client.post("/api/getDate", json={"serial": "SN-001"}).status_code == 200

        assert len(log_writer.rows) == 3

    def test_log_failure_does_not_change_response(self, settings, data_source, geo_resolver) -> None:
        writer = FailingLogWriter()
        client = TestClient(create_app(settings, data_source=data_source, geo_resolver=geo_resolver, log_writer=writer))

        response = client.post("/api/getDate", json={"serial": "SN-001"})

        assert response.status_code == 200
        assert response.json() == {"status": "Success", "date": "2024-01-15"}
        assert writer.attempts == 1

    def test_logging_disabled_without_log_sheet(self, settings, data_source) -> None:
        geo = FakeGeoResolver()
        client = TestClient(create_app(settings, data_source=data_source, geo_resolver=geo))

        response = client.post("/api/getDate", json={"serial": "SN-001"})

        assert response.status_code == 200
        assert geo.calls == []


class TestCors:
    @pytest.mark.parametrize("path", ["/api/getDate", "/api", "/anything"])
    def test_preflight_is_no_content(self, client: TestClient, path: str) -> None:
        response = client.options(
            path,
            headers={"Origin": "https://app.example", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    def test_error_responses_allow_any_origin(self, client: TestClient) -> None:
        response = client.post("/api/getDate", json={})

        assert response.headers["access-control-allow-origin"] == "*"
