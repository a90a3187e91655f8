from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

import form_json_repair.core.services.metrics_service as metrics
from form_json_repair.core.app.application_factory import build_app
from form_json_repair.core.config.app_config import AppConfig, RepairConfig
from form_json_repair.core.services.form_payload_service import FormPayloadService
from form_json_repair.core.services.repair_pipeline import RepairPipeline


@pytest.fixture(autouse=True)
def reset_metrics() -> Iterator[None]:
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def pipeline() -> RepairPipeline:
    return RepairPipeline()


@pytest.fixture
def repair_config() -> RepairConfig:
    return RepairConfig(max_field_bytes=1024)


@pytest.fixture
def form_service(
    repair_config: RepairConfig, pipeline: RepairPipeline
) -> FormPayloadService:
    return FormPayloadService(repair_config, pipeline)


@pytest.fixture
def test_client(repair_config: RepairConfig) -> TestClient:
    """A TestClient for the JSON field endpoints with a small size limit."""
    app = build_app(AppConfig(repair=repair_config))
    return TestClient(app)
