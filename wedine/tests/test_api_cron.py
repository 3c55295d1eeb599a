"""
Scheduled job API tests
"""

from datetime import timedelta

from wedine.utils.order_lifecycle import utc_now


class TestCronAuth:
    def test_missing_token(self, client):
        response = client.post("/api/v1/cron/cleanup-orders")
        assert response.status_code == 401

    def test_wrong_token(self, client):
        response = client.get("/api/v1/cron/cleanup-orders", headers={"Authorization": "Bearer guess"})
        assert response.status_code == 401

    def test_no_token_configured(self, client, cron_headers, test_settings):
        test_settings.cron_secret_token = None
        response = client.get("/api/v1/cron/cleanup-orders", headers=cron_headers)
        assert response.status_code == 401


class TestCronJobs:
    """Cleanup and move-to-history jobs"""

    def test_cleanup_orders(self, client, cron_headers, insert_order, test_db):
        insert_order(created_at=utc_now() - timedelta(hours=48))
        insert_order(user_id="user-2")

        response = client.get("/api/v1/cron/cleanup-orders", headers=cron_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Cleanup job completed successfully"
        assert body["processed"] == 1
        assert body["errors"] == []
        assert "timestamp" in body
        assert test_db.execute_one("SELECT COUNT(*) FROM orders")[0] == 1

    def test_move_ready_orders(self, client, cron_headers, insert_order, test_db):
        insert_order(status="delivered", payment_status=True)
        insert_order(user_id="user-2", status="preparing", payment_status=True)

        response = client.post("/api/v1/cron/move-ready-orders", headers=cron_headers)

        assert response.status_code == 200
        assert response.json()["moved"] == 1
        assert test_db.execute_one("SELECT COUNT(*) FROM order_history")[0] == 1
