"""Component tests for POST /notifications/mark-read and unread-count."""

from uuid import uuid4

from django.core.cache import cache
from django.test import Client, TestCase

from tests.factories import auth_headers, make_notification

MARK_READ_URL = "/api/v1/notification/notifications/mark-read"
UNREAD_COUNT_URL = "/api/v1/notification/notifications/unread-count"
LIST_URL = "/api/v1/notification/notifications"


class TestMarkReadEndpoint(TestCase):
    """Component tests for marking notifications as read."""

    def setUp(self):
        """Set up test fixtures."""
        cache.clear()
        self.client = Client()
        self.user_id = uuid4()
        self.headers = auth_headers(self.user_id)

    def _post(self, body, **extra):
        return self.client.post(
            MARK_READ_URL, body, content_type="application/json", **self.headers, **extra
        )

    def _unread_count(self):
        response = self.client.get(UNREAD_COUNT_URL, **self.headers)
        self.assertEqual(response.status_code, 200)
        return response.json()["data"]["count"]

    def test_unread_count_for_new_user(self):
        """Test a user with no notifications has a zero count."""
        self.assertEqual(self._unread_count(), 0)

    def test_read_and_count_scenario(self):
        """Test the three notification read scenario end to end."""
        n1 = make_notification(self.user_id, "like", minutes_ago=3)
        n2 = make_notification(self.user_id, "comment", minutes_ago=2)
        n3 = make_notification(self.user_id, "follow", minutes_ago=1)
        self.assertEqual(self._unread_count(), 3)

        response = self._post({"notificationId": str(n2.id)})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["success"])
        self.assertEqual(self._unread_count(), 2)

        listing = self.client.get(LIST_URL, {"unreadOnly": "true"}, **self.headers)
        ids = [item["id"] for item in listing.json()["data"]["data"]]
        self.assertEqual(ids, [str(n3.id), str(n1.id)])

        response = self._post({})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["data"]["success"])
        self.assertEqual(self._unread_count(), 0)

    def test_mark_read_twice_is_idempotent(self):
        """Test a repeated mark-read succeeds and decrements once."""
        notification = make_notification(self.user_id, minutes_ago=1)
        make_notification(self.user_id, minutes_ago=2)

        first = self._post({"notificationId": str(notification.id)})
        second = self._post({"notificationId": str(notification.id)})

        self.assertEqual(first.json()["data"]["updated"], 1)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(second.json()["data"]["updated"], 0)
        self.assertEqual(self._unread_count(), 1)

    def test_mark_read_unknown_notification_is_404(self):
        """Test marking an unknown notification read is an explicit error."""
        response = self._post({"notificationId": str(uuid4())})

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "not_found")

    def test_mark_read_other_users_notification_is_403(self):
        """Test callers cannot mark another user's notification read."""
        notification = make_notification(uuid4(), minutes_ago=1)

        response = self._post({"notificationId": str(notification.id)})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "forbidden")
        notification.refresh_from_db()
        self.assertFalse(notification.is_read)

    def test_malformed_notification_id_is_400(self):
        """Test malformed ids are rejected before reaching the store."""
        response = self._post({"notificationId": "n2"})

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_idempotency_key_replays_first_result(self):
        """Test a retried request with the same key replays the result."""
        notification = make_notification(self.user_id, minutes_ago=1)
        body = {"notificationId": str(notification.id)}

        first = self._post(body, HTTP_IDEMPOTENCY_KEY="retry-1")
        retry = self._post(body, HTTP_IDEMPOTENCY_KEY="retry-1")

        self.assertEqual(first.json()["data"], retry.json()["data"])
        self.assertEqual(retry.json()["data"]["updated"], 1)

    def test_reused_idempotency_key_marks_the_new_target(self):
        """Test a key reused for a different notification is not replayed."""
        n1 = make_notification(self.user_id, minutes_ago=2)
        n2 = make_notification(self.user_id, minutes_ago=1)

        self._post({"notificationId": str(n1.id)}, HTTP_IDEMPOTENCY_KEY="k1")
        response = self._post({"notificationId": str(n2.id)}, HTTP_IDEMPOTENCY_KEY="k1")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["updated"], 1)
        n2.refresh_from_db()
        self.assertTrue(n2.is_read)
        self.assertEqual(self._unread_count(), 0)

    def test_array_body_is_400(self):
        """Test a JSON array body is rejected and nothing is marked read."""
        make_notification(self.user_id, minutes_ago=1)

        response = self._post([])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "validation_error")
        self.assertEqual(self._unread_count(), 1)

    def test_misspelled_id_key_is_400(self):
        """Test an unknown body key is rejected rather than marking all read."""
        notification = make_notification(self.user_id, minutes_ago=1)

        response = self._post({"notificationID": str(notification.id)})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self._unread_count(), 1)
