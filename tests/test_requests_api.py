"""
API tests for the request lifecycle: collector submit, staff review, proof URL.
"""
from urllib.parse import parse_qs, urlparse

import pytest

from app.models.coa_request import CoaRequest

_IMAGES = {
    "proof_image": ("selfie.jpg", b"\xff\xd8proof", "image/jpeg"),
    "book_image": ("cover.png", b"\x89PNGbook", "image/png"),
}


def _submit(client, headers, profile, event_id, files=None, **fields):
    data = {"comic_title": "Saga", "issue_number": "1"}
    data.update(fields)
    return client.post(
        f"/api/v1/events/{event_id}/requests",
        data=data,
        files=_IMAGES if files is None else files,
        headers=headers(profile),
    )


def test_collector_submits_request(client, headers, collector, event):
    resp = _submit(client, headers, collector, event.id, attested="true", witness_name="Carl")
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["status"] == "pending"
    assert body["attested"] is True
    assert body["collector_user_id"] == collector.id
    assert body["book_image_url"].startswith("/api/v1/files/request-books/")
    # caminho privado não sai para o colecionador
    assert "proof_image_path" not in body


def test_submit_requires_auth(client, event):
    resp = client.post(f"/api/v1/events/{event.id}/requests", data={"comic_title": "x", "issue_number": "1"})
    assert resp.status_code == 401


def test_submit_to_inactive_event(client, headers, collector, make_event, artist):
    ev = make_event(artist, is_active=False)
    resp = _submit(client, headers, collector, ev.id)
    assert resp.status_code == 409
    assert resp.json()["code"] == "EVENT_INACTIVE"


def test_submit_blank_title(client, headers, collector, event):
    resp = _submit(client, headers, collector, event.id, comic_title="  ")
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"]["field"] == "comic_title"


@pytest.mark.parametrize("missing", ["proof_image", "book_image"])
def test_submit_requires_both_images(client, headers, collector, event, missing):
    files = {k: v for k, v in _IMAGES.items() if k != missing}
    resp = _submit(client, headers, collector, event.id, files=files)
    assert resp.status_code == 422, resp.text
    assert resp.json()["details"]["field"] == missing


def test_submit_rejects_empty_image(client, headers, collector, event):
    files = dict(_IMAGES, book_image=("cover.png", b"", "image/png"))
    resp = _submit(client, headers, collector, event.id, files=files)
    assert resp.status_code == 422
    assert resp.json()["details"]["field"] == "book_image"


def test_submit_without_images_stores_nothing(client, headers, collector, event, storage):
    resp = _submit(client, headers, collector, event.id, files={})
    assert resp.status_code == 422
    assert resp.json()["details"]["field"] == "proof_image"
    assert storage.list_prefix("request-books", str(collector.id)) == []


def test_staff_approves_and_second_approve_conflicts(client, headers, collector, reviewer, event):
    req_id = _submit(client, headers, collector, event.id).json()["id"]

    resp = client.post(f"/api/v1/requests/{req_id}/approve", headers=headers(reviewer))
    assert resp.status_code == 200, resp.text
    cert = resp.json()
    assert cert["comic_title"] == "Saga"
    assert cert["request_id"] == req_id

    again = client.post(f"/api/v1/requests/{req_id}/approve", headers=headers(reviewer))
    assert again.status_code == 409
    assert again.json()["code"] == "INVALID_STATE"

    detail = client.get(f"/api/v1/requests/{req_id}", headers=headers(reviewer)).json()
    assert detail["status"] == "approved"
    assert detail["issued_qr_id"] == cert["qr_id"]
    assert detail["event_name"] == event.event_name
    assert detail["collector_name"] == collector.full_name


def test_reject_without_reason_uses_default(client, headers, collector, reviewer, event):
    from app.core.config import settings

    req_id = _submit(client, headers, collector, event.id).json()["id"]
    resp = client.post(f"/api/v1/requests/{req_id}/reject", json={}, headers=headers(reviewer))
    assert resp.status_code == 200, resp.text
    assert resp.json()["rejection_reason"] == settings.DEFAULT_REJECTION_REASON


def test_non_staff_cannot_review(client, headers, collector, artist, event):
    req_id = _submit(client, headers, collector, event.id).json()["id"]
    for who in (collector, artist):
        resp = client.post(f"/api/v1/requests/{req_id}/approve", headers=headers(who))
        assert resp.status_code == 403
    assert client.get("/api/v1/requests/", headers=headers(collector)).status_code == 403


def test_list_requests_filters(client, headers, collector, reviewer, event):
    first = _submit(client, headers, collector, event.id).json()["id"]
    _submit(client, headers, collector, event.id, comic_title="Watchmen")
    client.post(f"/api/v1/requests/{first}/reject", json={"reason": "dup"}, headers=headers(reviewer))

    pending = client.get("/api/v1/requests/?status=pending", headers=headers(reviewer)).json()
    assert [r["comic_title"] for r in pending] == ["Watchmen"]
    everything = client.get(f"/api/v1/requests/?event_id={event.id}", headers=headers(reviewer)).json()
    assert len(everything) == 2


def test_proof_url_is_signed_and_served(client, headers, collector, reviewer, event, db):
    req_id = _submit(client, headers, collector, event.id).json()["id"]

    resp = client.get(f"/api/v1/requests/{req_id}/proof-url", headers=headers(reviewer))
    assert resp.status_code == 200, resp.text
    url = resp.json()["url"]
    query = parse_qs(urlparse(url).query)
    assert "signature" in query and "expires" in query

    served = client.get(url)
    assert served.status_code == 200
    assert served.content == b"\xff\xd8proof"

    # sem assinatura o bucket privado não abre
    bare = client.get(urlparse(url).path)
    assert bare.status_code == 403

    # colecionador não gera URL de prova
    assert client.get(f"/api/v1/requests/{req_id}/proof-url", headers=headers(collector)).status_code == 403
    assert db.get(CoaRequest, req_id).proof_image_path is not None
