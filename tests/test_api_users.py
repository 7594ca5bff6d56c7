"""Tests for the /api/users endpoints."""

import pytest


@pytest.fixture
def ann(client):
    response = client.post(
        "/api/users", json={"telegram_id": 555, "username": "ann", "first_name": "Ann"},
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestUsers:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_create(self, ann):
        assert ann["telegram_id"] == 555
        assert ann["username"] == "ann"
        assert ann["is_bot"] is False

    def test_duplicate_is_conflict(self, client, ann):
        response = client.post("/api/users", json={"telegram_id": 555})
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert "telegram_id" in body["errors"]

    def test_missing_telegram_id_is_rejected(self, client):
        response = client.post("/api/users", json={"first_name": "Nobody"})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_list(self, client, ann):
        response = client.get("/api/users")
        assert [u["telegram_id"] for u in response.json()["data"]] == [555]

    def test_show_and_not_found(self, client, ann):
        assert client.get("/api/users/555").json()["data"]["first_name"] == "Ann"
        response = client.get("/api/users/999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}

    def test_update_is_partial(self, client, ann):
        response = client.put("/api/users/555", json={"first_name": "Annie"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "Annie"
        assert data["username"] == "ann"

    def test_delete_removes_tasks(self, client, ann, task_service, account_db):
        account = account_db.get_by_telegram_id(555)
        task_service.create_task(account_id=account.id, title="A")

        response = client.delete("/api/users/555")
        assert response.status_code == 200
        assert client.get("/api/users/555").status_code == 404
        assert task_service.list_tasks(account.id) == []
