"""Tests for alternative and criterion endpoints."""
from uuid import uuid4

from fastapi.testclient import TestClient

from compass.models.domain import Rating


def _alternative_id(decision, name):
    return next(a.id for a in decision.alternatives if a.name == name)


def _criterion_id(decision, name):
    return next(c.id for c in decision.criteria if c.name == name)


# Alternatives
def test_list_alternatives(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.get(f"/api/v1/decisions/{test_decision.id}/alternatives", headers=get_auth_headers(test_user))
    assert response.status_code == 200
    data = response.json()
    assert [a["name"] for a in data] == ["A", "B"]
    assert [a["position"] for a in data] == [0, 1]


def test_add_alternative(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/alternatives",
        json={"name": "  C  ", "description": "Refurbished"},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "C"
    assert data["position"] == 2
    assert data["score"] == 0
    assert data["decision_id"] == str(test_decision.id)


def test_add_alternative_blank_name(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/alternatives",
        json={"name": "   "},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Alternative name is required."


def test_add_alternative_other_user_forbidden(client: TestClient, test_decision, other_user, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/alternatives",
        json={"name": "Sneaky"},
        headers=get_auth_headers(other_user),
    )
    assert response.status_code == 403


def test_update_alternative(client: TestClient, test_user, test_decision, get_auth_headers):
    alternative_id = _alternative_id(test_decision, "A")
    response = client.put(
        f"/api/v1/decisions/{test_decision.id}/alternatives/{alternative_id}",
        json={"name": "A2"},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 200
    assert response.json()["name"] == "A2"


def test_update_alternative_not_found(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.put(
        f"/api/v1/decisions/{test_decision.id}/alternatives/{uuid4()}",
        json={"name": "X"},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Alternative not found."


def test_delete_alternative_purges_its_ratings(
    client: TestClient, test_user, test_decision, rate, get_auth_headers, db_session
):
    rate(test_user, test_decision, "A", "C1", 8)
    rate(test_user, test_decision, "A", "C2", 4)
    rate(test_user, test_decision, "B", "C1", 6)
    alternative_id = _alternative_id(test_decision, "A")

    response = client.delete(
        f"/api/v1/decisions/{test_decision.id}/alternatives/{alternative_id}",
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Alternative removed successfully."}

    db_session.expire_all()
    remaining = db_session.query(Rating).filter(Rating.decision_id == test_decision.id).all()
    assert len(remaining) == 1
    assert all(r.alternative_id != alternative_id for r in remaining)

    response = client.get(f"/api/v1/decisions/{test_decision.id}/alternatives", headers=get_auth_headers(test_user))
    assert [a["name"] for a in response.json()] == ["B"]


# Criteria
def test_list_criteria(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.get(f"/api/v1/decisions/{test_decision.id}/criteria", headers=get_auth_headers(test_user))
    assert response.status_code == 200
    assert [(c["name"], c["weight"]) for c in response.json()] == [("C1", 2), ("C2", 1)]


def test_get_criterion(client: TestClient, test_user, test_decision, get_auth_headers):
    criterion_id = _criterion_id(test_decision, "C2")
    response = client.get(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}", headers=get_auth_headers(test_user)
    )
    assert response.status_code == 200
    assert response.json()["name"] == "C2"


def test_get_criterion_not_found(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.get(
        f"/api/v1/decisions/{test_decision.id}/criteria/{uuid4()}", headers=get_auth_headers(test_user)
    )
    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Criterion not found."


def test_add_criterion_default_weight(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "Battery"},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["weight"] == 1
    assert data["position"] == 2


def test_add_criterion_zero_weight(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "Colour", "weight": 0},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 201
    assert response.json()["weight"] == 0


def test_add_criterion_negative_weight(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "Colour", "weight": -1},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 422


def test_add_criterion_duplicate_name(client: TestClient, test_user, test_decision, get_auth_headers):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "C1", "weight": 3},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 400
    assert "already exists" in response.json()["error"]["message"]


def test_update_criterion_weight(client: TestClient, test_user, test_decision, get_auth_headers):
    criterion_id = _criterion_id(test_decision, "C1")
    response = client.put(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}",
        json={"weight": 5.5},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["weight"] == 5.5
    assert data["name"] == "C1"


def test_rename_criterion_to_existing_name(client: TestClient, test_user, test_decision, get_auth_headers):
    criterion_id = _criterion_id(test_decision, "C1")
    response = client.put(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}",
        json={"name": "C2"},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 400


def test_delete_criterion_purges_its_ratings(
    client: TestClient, test_user, test_decision, rate, get_auth_headers, db_session
):
    rate(test_user, test_decision, "A", "C1", 8)
    rate(test_user, test_decision, "B", "C1", 6)
    rate(test_user, test_decision, "B", "C2", 10)
    criterion_id = _criterion_id(test_decision, "C1")

    response = client.delete(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}",
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Criterion removed successfully."}

    db_session.expire_all()
    remaining = db_session.query(Rating).filter(Rating.decision_id == test_decision.id).all()
    assert [float(r.value) for r in remaining] == [10.0]


def test_delete_criterion_other_user_forbidden(client: TestClient, test_decision, other_user, get_auth_headers):
    criterion_id = _criterion_id(test_decision, "C1")
    response = client.delete(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}",
        headers=get_auth_headers(other_user),
    )
    assert response.status_code == 403


def test_add_criterion_rejects_third_decimal_place(
    client: TestClient, test_user, test_decision, get_auth_headers, db_session
):
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "Tiny", "weight": 0.004},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 422
    db_session.expire_all()
    assert [c.name for c in test_decision.criteria] == ["C1", "C2"]


def test_criterion_weight_kept_at_two_places(client: TestClient, test_user, test_decision, get_auth_headers):
    headers = get_auth_headers(test_user)
    response = client.post(
        f"/api/v1/decisions/{test_decision.id}/criteria",
        json={"name": "Small", "weight": 0.05},
        headers=headers,
    )
    assert response.status_code == 201

    response = client.get(f"/api/v1/decisions/{test_decision.id}/criteria/{response.json()['id']}", headers=headers)
    assert response.json()["weight"] == 0.05


def test_update_criterion_rejects_third_decimal_place(client: TestClient, test_user, test_decision, get_auth_headers):
    criterion_id = _criterion_id(test_decision, "C1")
    response = client.put(
        f"/api/v1/decisions/{test_decision.id}/criteria/{criterion_id}",
        json={"weight": 1.125},
        headers=get_auth_headers(test_user),
    )
    assert response.status_code == 422
