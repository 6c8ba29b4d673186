"""API tests for the notification routes."""

from uuid import uuid4

from fastapi.testclient import TestClient

from gulfquotes.core.errors import ForbiddenError
from gulfquotes.notifications.models import NotificationFilter
from gulfquotes.notifications.schemas import NotificationPage
from tests.fakes import auth_headers, make_user


class TestNotificationRoutes:
    def test_list_includes_unread_count(self, client: TestClient, app) -> None:
        user = make_user()
        service = app.state.notification_service
        service.list_notifications.return_value = NotificationPage(
            items=[], total=0, page=1, limit=20, unread_count=4
        )

        response = client.get(
            "/api/notifications?filter=unread&limit=20", headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json() == {
            "data": {
                "items": [],
                "total": 0,
                "hasMore": False,
                "page": 1,
                "limit": 20,
                "unreadCount": 4,
            }
        }
        service.list_notifications.assert_awaited_once_with(
            user.id, page=1, limit=20, filter=NotificationFilter.UNREAD
        )

    def test_unread_count(self, client: TestClient, app) -> None:
        app.state.notification_service.unread_count.return_value = 7

        response = client.get("/api/notifications/unread-count", headers=auth_headers(make_user()))

        assert response.json() == {"data": {"count": 7}}

    def test_mark_as_read(self, client: TestClient, app) -> None:
        user = make_user()
        notification_id = uuid4()

        response = client.patch(
            f"/api/notifications/{notification_id}/read", headers=auth_headers(user)
        )

        assert response.json() == {"data": {"id": str(notification_id), "read": True}}
        app.state.notification_service.mark_as_read.assert_awaited_once_with(
            notification_id, user.id
        )

    def test_mark_all_as_read(self, client: TestClient, app) -> None:
        app.state.notification_service.mark_all_as_read.return_value = 3

        response = client.post("/api/notifications/read-all", headers=auth_headers(make_user()))

        assert response.json() == {"data": {"count": 3}}

    def test_delete_someone_elses(self, client: TestClient, app) -> None:
        app.state.notification_service.delete.side_effect = ForbiddenError(
            "You can only delete your own notifications"
        )

        response = client.delete(
            f"/api/notifications/{uuid4()}", headers=auth_headers(make_user())
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_delete(self, client: TestClient, app) -> None:
        notification_id = uuid4()

        response = client.delete(
            f"/api/notifications/{notification_id}", headers=auth_headers(make_user())
        )

        assert response.json() == {"data": {"id": str(notification_id), "deleted": True}}

    def test_requires_authentication(self, client: TestClient) -> None:
        assert client.get("/api/notifications").status_code == 401

    def test_invalid_filter(self, client: TestClient) -> None:
        response = client.get(
            "/api/notifications?filter=starred", headers=auth_headers(make_user())
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "query.filter"
