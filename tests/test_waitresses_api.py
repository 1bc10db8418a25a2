"""Staff endpoints and their role checks."""
from conftest import full_scores, make_staff
from reviewly.services import staff_service


def submit_review(client, staff_id, ip, value=5):
    return client.post(
        "/api/reviews",
        json={"staff_id": staff_id, "ratings": full_scores(value)},
        headers={"X-Real-IP": ip},
    )


def test_public_list_only_active(client, database):
    active = make_staff(database, "Ana")
    make_staff(database, "Beto", is_active=False)

    response = client.get("/api/waitresses")
    assert response.status_code == 200
    body = response.get_json()
    assert [s["id"] for s in body] == [active["id"]]
    assert body[0]["average_rating"] == 0
    assert body[0]["review_count"] == 0


def test_admin_list_includes_inactive(client, database, manager_headers):
    make_staff(database, "Ana")
    make_staff(database, "Beto", is_active=False)

    assert client.get("/api/waitresses/admin/all").status_code == 401
    response = client.get("/api/waitresses/admin/all", headers=manager_headers)
    assert response.status_code == 200
    assert len(response.get_json()) == 2


def test_get_single_with_optional_auth(client, database, admin_headers):
    inactive = make_staff(database, "Beto", is_active=False)

    assert client.get(f"/api/waitresses/{inactive['id']}").status_code == 404
    response = client.get(f"/api/waitresses/{inactive['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["name"] == "Beto"


def test_create_requires_staff_role(client, usuario_headers, manager_headers):
    payload = {"name": "Carmen", "gender": "mesera"}
    assert client.post("/api/waitresses", json=payload).status_code == 401
    assert client.post("/api/waitresses", json=payload, headers=usuario_headers).status_code == 403

    response = client.post("/api/waitresses", json=payload, headers=manager_headers)
    assert response.status_code == 201
    waitress = response.get_json()["waitress"]
    assert waitress["employee_code"].startswith("EMP-")
    assert waitress["gender"] == "mesera"


def test_create_validation(client, admin_headers):
    response = client.post("/api/waitresses", json={"name": "A"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["details"]

    response = client.post(
        "/api/waitresses", json={"name": "Carmen", "gender": "otro"}, headers=admin_headers
    )
    assert response.status_code == 400


def test_update_and_soft_deactivate(client, database, manager_headers):
    staff = make_staff(database, "Ana")

    response = client.put(
        f"/api/waitresses/{staff['id']}",
        json={"name": "Ana María", "is_active": False},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["waitress"]["is_active"] is False
    assert client.get("/api/waitresses").get_json() == []


def test_update_unknown(client, admin_headers):
    response = client.put("/api/waitresses/999", json={"name": "Nadie"}, headers=admin_headers)
    assert response.status_code == 404


def test_hard_delete_is_admin_only(client, database, manager_headers, admin_headers):
    staff = make_staff(database, "Ana")
    assert client.delete(f"/api/waitresses/{staff['id']}", headers=manager_headers).status_code == 403

    response = client.delete(f"/api/waitresses/{staff['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/waitresses/{staff['id']}", headers=admin_headers).status_code == 404


def test_stats_after_delete_are_zero(client, database, admin_headers):
    staff = make_staff(database, "Ana")
    assert submit_review(client, staff["id"], "10.1.1.1", value=4).status_code == 201
    assert submit_review(client, staff["id"], "10.1.1.2", value=5).status_code == 201

    response = client.get(f"/api/waitresses/{staff['id']}/stats", headers=admin_headers)
    assert response.status_code == 200
    stats = response.get_json()
    assert stats["count"] == 2
    assert stats["average_rating"] == 4.5
    assert stats["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}

    client.delete(f"/api/waitresses/{staff['id']}", headers=admin_headers)

    response = client.get(f"/api/waitresses/{staff['id']}/stats", headers=admin_headers)
    assert response.status_code == 200
    stats = response.get_json()
    assert stats["count"] == 0
    assert stats["average_rating"] == 0


def test_stats_require_authentication(client, staff):
    assert client.get(f"/api/waitresses/{staff['id']}/stats").status_code == 401


def test_listing_summary_reflects_reviews(client, staff):
    submit_review(client, staff["id"], "10.1.1.1", value=3)
    body = client.get("/api/waitresses").get_json()
    assert body[0]["review_count"] == 1
    assert body[0]["average_rating"] == 3.0


def test_update_ignores_nulls_for_required_fields(client, database, manager_headers):
    staff = make_staff(database, "Ana")
    url = f"/api/waitresses/{staff['id']}"

    for payload in ({"name": None}, {"gender": None}, {"is_active": None}):
        response = client.put(url, json=payload, headers=manager_headers)
        assert response.status_code == 200
        waitress = response.get_json()["waitress"]
        assert waitress["name"] == "Ana"
        assert waitress["gender"] == staff["gender"]
        assert waitress["is_active"] is True


def test_update_can_clear_photo(client, database, manager_headers):
    staff = make_staff(database, "Ana")
    url = f"/api/waitresses/{staff['id']}"
    client.put(url, json={"photo_url": "https://img.example/ana.png"}, headers=manager_headers)

    response = client.put(url, json={"photo_url": None}, headers=manager_headers)
    assert response.status_code == 200
    assert response.get_json()["waitress"]["photo_url"] is None


def test_non_object_body_is_rejected(client, manager_headers):
    response = client.post("/api/waitresses", json=["Carmen"], headers=manager_headers)
    assert response.status_code == 400


def test_unexpected_failure_is_json_500(client, monkeypatch):
    def broken(session):
        raise RuntimeError("boom")

    monkeypatch.setattr(staff_service, "list_active_staff", broken)
    response = client.get("/api/waitresses")
    assert response.status_code == 500
    assert response.get_json() == {"message": "Error al obtener personal"}
