import base64
import uuid

import pytest
from fastapi import BackgroundTasks, HTTPException
from sqlmodel import select

from app.db.schema import AuditLog, AuditAction, EwasteRequest, User
from app.models.ewaste_request import EwasteRequestCreate
from app.services.ewaste_request import EwasteRequestService
from app.utils.file_storage import REQUEST_IMG_DIR


def _history(client, headers) -> list:
    response = client.get("/api/v1/requests/", headers=headers)
    assert response.status_code == 200
    return response.json()


def test_submission_starts_pending(client, user_headers, submit, company) -> None:
    card = submit(user_headers, address="12 MG Road")

    assert card["status"] == "pending"
    assert card["status_label"] == "PENDING"
    assert card["company_name"] == "GreenCycle Recyclers"
    assert card["display_value"] == "₹450"
    assert card["agent_name"] is None
    assert card["version"] == 1
    assert card["can_edit"] is True


def test_submission_to_unknown_company_is_404(client, user_headers) -> None:
    response = client.post("/api/v1/requests/", headers=user_headers, json={
        "company_id": str(uuid.uuid4()), "name": "Phone", "quantity": 1,
    })
    assert response.status_code == 404


def test_submission_with_photo(client, user_headers, submit) -> None:
    photo = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
    card = submit(user_headers, image_base64=photo)
    assert card["image_url"].startswith("http://localhost:8000/static/requests/")
    assert card["image_url"].endswith(".png")


def _stored_images() -> set:
    return set(REQUEST_IMG_DIR.glob("*"))


def test_failed_submission_leaves_no_image_behind(user_headers, company, db, monkeypatch) -> None:
    photo = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
    before = _stored_images()

    def _fail():
        raise RuntimeError("database unavailable")

    with db() as session:
        user = session.exec(select(User).where(User.email == "asha@example.com")).one()
        monkeypatch.setattr(session, "commit", _fail)
        data = EwasteRequestCreate(company_id=uuid.UUID(company["id"]), name="Phone",
                                   image_base64=photo)

        with pytest.raises(HTTPException) as exc:
            EwasteRequestService(session).create_request(user, data, BackgroundTasks())

    assert exc.value.status_code == 500
    assert _stored_images() == before


def test_deleting_a_request_removes_its_image(client, user_headers, submit) -> None:
    photo = "data:image/png;base64," + base64.b64encode(b"\x89PNG fake").decode()
    card = submit(user_headers, image_base64=photo)
    stored = REQUEST_IMG_DIR / card["image_url"].rsplit("/", 1)[-1]
    assert stored.exists()

    assert client.delete(f"/api/v1/requests/{card['id']}", headers=user_headers).status_code == 200
    assert not stored.exists()


def test_invalid_photo_is_rejected(client, user_headers, company) -> None:
    response = client.post("/api/v1/requests/", headers=user_headers, json={
        "company_id": company["id"], "name": "Phone",
        "image_base64": "data:image/png;base64,@@not-base64@@",
    })
    assert response.status_code == 400


def test_pending_and_approved_cards(client, user_headers, submit, company) -> None:
    pending = submit(user_headers, name="Old phone")
    approved = submit(user_headers, name="CRT monitor")
    client.post(f"/api/v1/review/requests/{approved['id']}/approve", headers=company["headers"])

    cards = {c["id"]: c for c in _history(client, user_headers)}
    assert len(cards) == 2

    assert cards[pending["id"]]["status_label"] == "PENDING"
    assert cards[pending["id"]]["can_edit"] is True
    assert cards[approved["id"]]["status_label"] == "APPROVED"
    assert cards[approved["id"]]["status_class"] == "status-approved"
    assert cards[approved["id"]]["can_edit"] is False


def test_history_only_shows_own_requests(client, user_headers, other_user_headers, submit) -> None:
    submit(user_headers)
    assert _history(client, other_user_headers) == []


def test_edit_writes_only_given_fields(client, user_headers, submit) -> None:
    card = submit(user_headers)

    response = client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers,
                            json={"quantity": 3, "weight": 7.5})
    assert response.status_code == 200
    updated = response.json()
    assert updated["quantity"] == 3
    assert updated["weight"] == 7.5
    assert updated["name"] == card["name"]
    assert updated["prize"] == card["prize"]
    assert updated["version"] == 2


def test_edit_refused_once_approved(client, user_headers, submit, company) -> None:
    card = submit(user_headers)
    client.post(f"/api/v1/review/requests/{card['id']}/approve", headers=company["headers"])

    response = client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers,
                            json={"name": "Changed"})
    assert response.status_code == 400


def test_edit_allowed_after_rejection(client, user_headers, submit, company) -> None:
    card = submit(user_headers)
    client.post(f"/api/v1/review/requests/{card['id']}/reject", headers=company["headers"])

    response = client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers,
                            json={"name": "Changed"})
    assert response.status_code == 200


def test_stale_edit_is_a_conflict(client, user_headers, submit, db) -> None:
    card = submit(user_headers)
    client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers, json={"name": "First"})

    response = client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers,
                            json={"name": "Second", "expected_version": 1})
    assert response.status_code == 409

    with db() as session:
        stored = session.get(EwasteRequest, uuid.UUID(card["id"]))
        assert stored.name == "First"


def test_cannot_edit_someone_elses_request(client, user_headers, other_user_headers, submit) -> None:
    card = submit(user_headers)
    response = client.patch(f"/api/v1/requests/{card['id']}", headers=other_user_headers,
                            json={"name": "Mine now"})
    assert response.status_code == 403


def test_delete_removes_from_history_and_store(client, user_headers, submit, db) -> None:
    kept = submit(user_headers, name="Keyboard")
    gone = submit(user_headers, name="Printer")

    response = client.delete(f"/api/v1/requests/{gone['id']}", headers=user_headers)
    assert response.status_code == 200

    assert [c["id"] for c in _history(client, user_headers)] == [kept["id"]]
    with db() as session:
        assert session.get(EwasteRequest, uuid.UUID(gone["id"])) is None
        actions = session.exec(
            select(AuditLog.action).where(AuditLog.entity_id == uuid.UUID(gone["id"]))
        ).all()
        assert AuditAction.DELETE in actions


def test_stale_delete_is_a_conflict(client, user_headers, submit) -> None:
    card = submit(user_headers)
    client.patch(f"/api/v1/requests/{card['id']}", headers=user_headers, json={"name": "Edited"})

    response = client.delete(f"/api/v1/requests/{card['id']}?expected_version=1",
                             headers=user_headers)
    assert response.status_code == 409
    assert len(_history(client, user_headers)) == 1


def test_delete_unknown_request_is_404(client, user_headers) -> None:
    response = client.delete(f"/api/v1/requests/{uuid.uuid4()}", headers=user_headers)
    assert response.status_code == 404
