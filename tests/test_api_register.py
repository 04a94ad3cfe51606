from __future__ import annotations

import io
import json
import os

from pymongo.errors import ServerSelectionTimeoutError

from eventreg import create_app
from eventreg.storage.registrations import RegistrationStore


def _png(name="me.png", size=64, mimetype="image/png"):
    return (io.BytesIO(b"\x89PNG\r\n\x1a\n" + b"0" * size), name, mimetype)


def test_register_json_then_listed(app_client, admin_headers, valid_payload):
    r = app_client.post("/api/register", json=valid_payload)
    assert r.status_code == 201
    body = r.get_json()
    assert body["success"] is True
    assert body["message"] == "Registration successful!"
    reg_id = body["registrationId"]

    rows = app_client.get("/api/admin/registrations", headers=admin_headers).get_json()
    assert [row["_id"] for row in rows] == [reg_id]
    row = rows[0]
    assert row["email"] == "a@b.com"
    assert row["selectedEvents"] == ["quiz"]
    assert row["isPresent"] is False
    assert row["paymentMethod"] is None
    assert row["idPhotoPath"] is None
    assert row["registrationDate"]


def test_duplicate_email_is_conflict(app_client, store, valid_payload):
    assert app_client.post("/api/register", json=valid_payload).status_code == 201
    r = app_client.post("/api/register", json=valid_payload)
    assert r.status_code == 409
    assert "error" in r.get_json()
    assert store.count() == 1


def test_duplicate_email_ignores_case_and_spaces(app_client, store, valid_payload):
    app_client.post("/api/register", json=valid_payload)
    again = dict(valid_payload, email="  A@B.COM ")
    assert app_client.post("/api/register", json=again).status_code == 409
    assert store.count() == 1


def test_missing_fields_are_named(app_client, store, valid_payload):
    payload = dict(valid_payload)
    del payload["college"]
    payload["sem"] = "   "
    r = app_client.post("/api/register", json=payload)
    assert r.status_code == 400
    body = r.get_json()
    assert body["details"]["fields"] == ["college", "sem"]
    assert store.count() == 0


def test_no_event_selected(app_client, store, valid_payload):
    for events in ([], "[]", "", ["  "]):
        r = app_client.post("/api/register", json=dict(valid_payload, selectedEvents=events))
        assert r.status_code == 400, events
    assert store.count() == 0


def test_invalid_email_and_contact_rejected(app_client, store, valid_payload):
    for bad in ({"email": "not-an-email"}, {"email": "a b@c.com"}, {"contact": "1234567890"},
                {"contact": "98765"}, {"contact": "98765432101"}):
        r = app_client.post("/api/register", json=dict(valid_payload, **bad))
        assert r.status_code == 400, bad
    assert store.count() == 0


def test_status_fields_not_accepted_at_creation(app_client, admin_headers, valid_payload):
    payload = dict(valid_payload, isPresent=True, paymentMethod="cash")
    assert app_client.post("/api/register", json=payload).status_code == 201
    row = app_client.get("/api/admin/registrations", headers=admin_headers).get_json()[0]
    assert row["isPresent"] is False
    assert row["paymentMethod"] is None


def test_multipart_with_photo(app_client, admin_headers, valid_payload, upload_dir):
    data = dict(valid_payload, selectedEvents=json.dumps(["quiz", "dance"]))
    data["idPhoto"] = _png()
    r = app_client.post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 201

    row = app_client.get("/api/admin/registrations", headers=admin_headers).get_json()[0]
    assert row["selectedEvents"] == ["quiz", "dance"]
    assert row["idPhotoPath"].startswith("uploads/me-")
    assert row["idPhotoPath"].endswith(".png")
    stored = os.path.join(upload_dir, os.path.basename(row["idPhotoPath"]))
    assert os.path.exists(stored)

    served = app_client.get("/" + row["idPhotoPath"])
    assert served.status_code == 200
    assert served.data.startswith(b"\x89PNG")


def test_multipart_repeated_events_field(app_client, admin_headers, valid_payload):
    data = dict(valid_payload, selectedEvents=["quiz", "dance"])
    r = app_client.post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 201
    row = app_client.get("/api/admin/registrations", headers=admin_headers).get_json()[0]
    assert row["selectedEvents"] == ["quiz", "dance"]


def test_multipart_plain_event_name(app_client, admin_headers, valid_payload):
    data = dict(valid_payload, selectedEvents="quiz night")
    r = app_client.post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 201
    row = app_client.get("/api/admin/registrations", headers=admin_headers).get_json()[0]
    assert row["selectedEvents"] == ["quiz night"]


def test_photo_wrong_type_rejected(app_client, store, valid_payload, upload_dir):
    data = dict(valid_payload, selectedEvents="quiz")
    data["idPhoto"] = (io.BytesIO(b"%PDF-1.4"), "id.pdf", "application/pdf")
    r = app_client.post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Only JPEG/PNG images allowed"
    assert store.count() == 0
    assert os.listdir(upload_dir) == []


def test_photo_too_large_rejected(app, store, valid_payload, upload_dir):
    app.config["MAX_UPLOAD_BYTES"] = 1024
    data = dict(valid_payload, selectedEvents="quiz")
    data["idPhoto"] = _png(size=4096)
    r = app.test_client().post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 400
    assert store.count() == 0


def test_photo_removed_when_email_taken(app_client, valid_payload, upload_dir):
    app_client.post("/api/register", json=valid_payload)
    data = dict(valid_payload, selectedEvents="quiz")
    data["idPhoto"] = _png()
    r = app_client.post("/api/register", data=data, content_type="multipart/form-data")
    assert r.status_code == 409
    assert os.listdir(upload_dir) == []


def test_storage_failure_is_internal_error(app_client, store, valid_payload, monkeypatch):
    def boom(record):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(store, "create", boom)
    r = app_client.post("/api/register", json=valid_payload)
    assert r.status_code == 500
    assert r.get_json()["error"] == "Registration failed"


class _IndexesLateStore(RegistrationStore):
    """Index creation fails until the database has `failures` times refused it."""

    def __init__(self, collection, failures=1):
        super().__init__(collection)
        self.failures = failures

    def ensure_indexes(self):
        if self.failures:
            self.failures -= 1
            raise ServerSelectionTimeoutError("db not up yet")
        super().ensure_indexes()


def test_duplicate_rejected_when_startup_indexing_failed(mock_db, upload_dir, valid_payload):
    store = _IndexesLateStore(mock_db["registrations"], failures=1)
    client = create_app(testing=True, store=store, UPLOAD_DIR=upload_dir).test_client()

    assert client.post("/api/register", json=valid_payload).status_code == 201
    r = client.post("/api/register", json=valid_payload)
    assert r.status_code == 409
    assert store.count() == 1


def test_no_insert_without_unique_index(mock_db, upload_dir, valid_payload):
    store = _IndexesLateStore(mock_db["registrations"], failures=10)
    client = create_app(testing=True, store=store, UPLOAD_DIR=upload_dir).test_client()

    for _ in range(2):
        r = client.post("/api/register", json=valid_payload)
        assert r.status_code == 500
        assert r.get_json()["error"] == "Registration failed"
    assert store.count() == 0
