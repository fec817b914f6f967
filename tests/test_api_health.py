"""Tests for API health and index endpoints.

These tests validate deterministic response behavior for healthy and
database-unavailable states.
"""

from fastapi.testclient import TestClient

from publication_export.api import create_api_application
from publication_export.config import AppSettings
from publication_export.domain import HealthStatus


class _HealthyDatabaseService:
    """Test double that simulates a healthy job database."""

    def db_connection_label(self) -> str:
        return "sqlite:///jobs.db"

    def db_check_health(self) -> HealthStatus:
        """Return healthy database result.

        Returns:
            HealthStatus: Healthy DB response.
        """

        return HealthStatus(status="ok", detail="database connectivity verified")


class _FailingDatabaseService:
    """Test double that simulates a database connectivity failure."""

    def db_connection_label(self) -> str:
        return "sqlite:///jobs.db"

    def db_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("database connectivity check failed")


class _UnusedDependency:
    """Placeholder for dependencies the health endpoint never touches."""


def _build_client(db_health_service) -> TestClient:
    application = create_api_application(
        settings=AppSettings(environment_name="test"),
        db_health_service=db_health_service,
        job_repository=_UnusedDependency(),
        request_service=_UnusedDependency(),
        scheduler=_UnusedDependency(),
    )
    return TestClient(application)


def test_api_health_returns_success_when_database_is_available() -> None:
    """Return HTTP 200 and healthy payload when DB service reports success.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client(_HealthyDatabaseService()).get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "app": "up",
        "database": "ok",
        "detail": "database connectivity verified",
        "target": "sqlite:///jobs.db",
    }


def test_api_health_returns_service_unavailable_when_database_is_down() -> None:
    """Return HTTP 503 and degraded payload when DB service reports failure.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    response = _build_client(_FailingDatabaseService()).get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["app"] == "up"
    assert response.json()["database"] == "down"


def test_api_index_reports_environment() -> None:
    response = _build_client(_HealthyDatabaseService()).get("/")

    assert response.status_code == 200
    assert response.json() == {"service": "publication-export", "status": "ready", "environment": "test"}
