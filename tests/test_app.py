"""Tests for application-wide error rendering."""

from fastapi.testclient import TestClient

from gulfquotes.auth.permissions import UserRole
from gulfquotes.core.errors import DuplicateSlugError
from tests.fakes import auth_headers, make_user


def test_app_error_details(client: TestClient, app) -> None:
    app.state.quote_service.update.side_effect = DuplicateSlugError(details={"slug": "be-kind"})

    response = client.patch(
        "/api/quotes/be-kind",
        json={"featured": True},
        headers=auth_headers(make_user(UserRole.ADMIN)),
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": {
            "code": "DUPLICATE_SLUG",
            "message": "Quote with similar content already exists",
            "details": {"slug": "be-kind"},
        }
    }


def test_unexpected_errors_are_hidden(client: TestClient, app) -> None:
    app.state.quote_service.require_by_slug.side_effect = RuntimeError("secret host 10.0.0.3")

    response = client.get("/api/quotes/be-kind")

    assert response.status_code == 500
    assert response.json() == {
        "error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}
    }


def test_invalid_token(client: TestClient) -> None:
    response = client.get(
        "/api/notifications", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid or expired token"
