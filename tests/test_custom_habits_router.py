def _create(client, auth_headers, **overrides):
    payload = {"name": "Read 10 pages", "icon": "book.fill"}
    payload.update(overrides)
    return client.post("/api/custom-habits/", json=payload, headers=auth_headers)


def test_create_and_list_custom_habits(client, auth_headers):
    response = _create(client, auth_headers)
    assert response.status_code == 201
    habit = response.json()
    assert habit["verification_type"] == "honor_system"
    assert habit["active_days"] == [0, 1, 2, 3, 4, 5, 6]

    second = _create(client, auth_headers, name="Vitamins", icon="pill.fill").json()
    assert second["display_order"] == 1

    names = [h["name"] for h in client.get("/api/custom-habits/", headers=auth_headers).json()]
    assert names == ["Read 10 pages", "Vitamins"]


def test_create_validates_fields(client, auth_headers):
    assert _create(client, auth_headers, icon="rocket").status_code == 400
    assert _create(client, auth_headers, name="   ").status_code == 400
    assert _create(client, auth_headers, name="x" * 101).status_code == 400
    assert _create(client, auth_headers, ai_prompt="x" * 2001).status_code == 400
    assert _create(client, auth_headers, active_days=[9]).status_code == 400


def test_update_and_deactivate(client, auth_headers):
    habit = _create(client, auth_headers).json()

    response = client.put(
        f"/api/custom-habits/{habit['id']}", json={"name": "  Read 20 pages "}, headers=auth_headers
    )
    assert response.json()["name"] == "Read 20 pages"

    client.put(f"/api/custom-habits/{habit['id']}", json={"is_active": False}, headers=auth_headers)
    assert client.get("/api/custom-habits/", headers=auth_headers).json() == []
    inactive = client.get("/api/custom-habits/?include_inactive=true", headers=auth_headers).json()
    assert len(inactive) == 1


def test_delete_custom_habit(client, auth_headers):
    habit = _create(client, auth_headers).json()

    response = client.delete(f"/api/custom-habits/{habit['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert client.delete(f"/api/custom-habits/{habit['id']}", headers=auth_headers).status_code == 404
    assert client.put(
        f"/api/custom-habits/{habit['id']}", json={"name": "Gone"}, headers=auth_headers
    ).status_code == 404


def test_complete_custom_habit_counts_toward_routine(client, auth_headers):
    habit = _create(client, auth_headers).json()

    status = client.get("/api/routine/status", headers=auth_headers).json()
    assert status["total_enabled"] == 5

    response = client.post(f"/api/custom-habits/{habit['id']}/complete", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["is_completed"] is True

    status = client.get("/api/routine/status", headers=auth_headers).json()
    assert status["completed_count"] == 1
    assert status["custom_habits"][0]["completion"]["is_completed"] is True


def test_custom_habit_not_scheduled_today(client, auth_headers):
    # 2025-03-10 is a Monday; day 6 is Saturday
    habit = _create(client, auth_headers, active_days=[6]).json()
    response = client.post(f"/api/custom-habits/{habit['id']}/complete", headers=auth_headers)
    assert response.status_code == 404


def test_verify_custom_habit_photo(client, auth_headers, vision, jpeg_base64):
    habit = _create(
        client, auth_headers,
        verification_type="ai_verified",
        ai_prompt="An open book with visible pages",
    ).json()
    vision.payload = {"is_verified": True, "detected_subject": "book", "feedback": "Happy reading"}

    response = client.post(
        f"/api/custom-habits/{habit['id']}/verify", json={"imageBase64": jpeg_base64}, headers=auth_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["result"]["is_verified"] is True
    assert body["completion"]["ai_feedback"] == "Happy reading"
    assert body["lock_in"] is None
    assert "An open book with visible pages" in vision.calls[0]["prompt"]


def test_rejected_photo_leaves_habit_open(client, auth_headers, vision, jpeg_base64):
    habit = _create(client, auth_headers, verification_type="ai_verified").json()
    vision.payload = {"is_verified": False, "feedback": "That's a toaster"}

    response = client.post(
        f"/api/custom-habits/{habit['id']}/verify", json={"imageBase64": jpeg_base64}, headers=auth_headers
    )

    assert response.json()["completion"] is None
    assert client.get("/api/routine/status", headers=auth_headers).json()["completed_count"] == 0


def test_honor_habit_cannot_be_photo_verified(client, auth_headers, jpeg_base64):
    habit = _create(client, auth_headers).json()
    response = client.post(
        f"/api/custom-habits/{habit['id']}/verify", json={"imageBase64": jpeg_base64}, headers=auth_headers
    )
    assert response.status_code == 400
