"""Shared test fixtures for all test modules."""

import pytest
from fastapi.testclient import TestClient

from serial_lookup_api.app.core.config import Settings
from serial_lookup_api.app.main import create_app

from .helpers import FakeDataSource, FakeGeoResolver, RecordingLogWriter


@pytest.fixture
def data_source() -> FakeDataSource:
    return FakeDataSource({"SN-001": "2024-01-15", "SN-002": "2025-06-30"})


@pytest.fixture
def geo_resolver() -> FakeGeoResolver:
    return FakeGeoResolver()


@pytest.fixture
def log_writer() -> RecordingLogWriter:
    return RecordingLogWriter()


@pytest.fixture
def settings() -> Settings:
    return Settings(data_source="csv", sheet_csv_url="http://sheet.test/pub?output=csv", log_spreadsheet_id="")


@pytest.fixture
def client(settings, data_source, geo_resolver, log_writer) -> TestClient:
    app = create_app(settings, data_source=data_source, geo_resolver=geo_resolver, log_writer=log_writer)
    return TestClient(app)
