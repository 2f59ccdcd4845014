"""
Tests for the user endpoints and statistics.

Tests verify that:
- Invalid updates are rejected with 400 before the datastore is called
- Connector soft failures surface as 500 with the connector's message
- Successful updates / deletes return the documented messages
- Statistics are passed through unchanged
"""

from __future__ import annotations

from app.models.user import ConnectorResult


VALID_UPDATE = {
    "userId": "USR001",
    "companyName": "新テスト不動産",
    "storeName": "恵比寿店",
    "email": "ebisu@example.com",
    "phoneNumber": "03-1111-1111",
    "address": "東京都渋谷区恵比寿",
}


def test_update_user(client, datastore):
    response = client.put("/api/users/update", json=VALID_UPDATE)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "ユーザー情報が更新されました"
    assert body["data"]["storeName"] == "恵比寿店"
    assert datastore.users[1].email == "ebisu@example.com"


def test_update_user_bad_email_never_reaches_datastore(client, datastore):
    response = client.put("/api/users/update", json={**VALID_UPDATE, "email": "not-an-email"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "メールアドレスの形式が正しくありません"}
    assert datastore.calls == []


def test_update_user_unknown_role_never_reaches_datastore(client, datastore):
    response = client.put("/api/users/update", json={**VALID_UPDATE, "role": "superuser"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "有効な権限を指定してください"}
    assert datastore.calls == []


def test_update_user_unknown_status_never_reaches_datastore(client, datastore):
    response = client.put("/api/users/update", json={**VALID_UPDATE, "status": "deleted"})

    assert response.status_code == 400
    assert datastore.calls == []


def test_update_user_names_first_missing_field(client, datastore):
    payload = {**VALID_UPDATE, "storeName": "", "phoneNumber": ""}

    response = client.put("/api/users/update", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "storeNameは必須項目です"
    assert datastore.calls == []


def test_update_user_requires_user_id(client, datastore):
    payload = {k: v for k, v in VALID_UPDATE.items() if k != "userId"}

    response = client.put("/api/users/update", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "ユーザーIDが必要です"


def test_update_unknown_user_is_soft_failure(client):
    response = client.put("/api/users/update", json={**VALID_UPDATE, "userId": "USR404"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "ユーザーが見つかりません"}


def test_update_user_connector_raises(client, datastore):
    datastore.failures["update_user"] = RuntimeError("sheet unavailable")

    response = client.put("/api/users/update", json=VALID_UPDATE)

    assert response.status_code == 500
    assert response.json()["error"] == "サーバーエラーが発生しました"


def test_delete_user(client, datastore):
    response = client.request("DELETE", "/api/users/delete", json={"userId": "USR001"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "ユーザーが削除されました"}
    assert [user.id for user in datastore.users] == ["ADM001"]


def test_delete_user_requires_id(client, datastore):
    response = client.request("DELETE", "/api/users/delete", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "ユーザーIDが必要です"
    assert datastore.calls == []


def test_delete_user_soft_failure_message(client, datastore):
    datastore.soft_results["delete_user"] = ConnectorResult(success=False, error="削除できません")

    response = client.request("DELETE", "/api/users/delete", json={"userId": "USR001"})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "削除できません"}


def test_list_users_has_no_password(client):
    response = client.get("/api/users")

    assert response.status_code == 200
    users = response.json()["data"]
    assert [user["id"] for user in users] == ["ADM001", "USR001"]
    assert all("password" not in user for user in users)


def test_statistics_pass_through(client, datastore):
    datastore.statistics = {"totalOrders": 3, "statusBreakdown": {"日程待ち": 2, "完了": 1}}

    response = client.get("/api/statistics")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"totalOrders": 3, "statusBreakdown": {"日程待ち": 2, "完了": 1}},
    }


def test_statistics_failure(client, datastore):
    datastore.failures["get_statistics"] = RuntimeError("down")

    response = client.get("/api/statistics")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "データの取得に失敗しました"}


def test_health(client):
    assert client.get("/").json() == {"status": "ok", "message": "Order backend running"}
