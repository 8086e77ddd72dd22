"""
API tests for certificates: staff management and public verification.
"""
import pytest

from app.schemas.coa_request import CoaRequestPayload
from app.services import workflow


@pytest.fixture
def issued(db, collector, reviewer, event, storage):
    req = workflow.submit_request(
        db, collector, event.id,
        CoaRequestPayload(comic_title="Hellboy", issue_number="3", attested=True),
        storage=storage,
        proof=workflow.UploadedImage("selfie.jpg", b"proof"),
        book=workflow.UploadedImage("cover.jpg", b"book"),
    )
    return workflow.approve_request(db, reviewer, req.id)


def test_public_lookup_is_sanitized(client, issued, event):
    resp = client.get(f"/api/v1/public/certificates/{issued.qr_id}")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert set(body) == {
        "qr_id", "comic_title", "issue_number", "signed_by", "signed_date",
        "signed_location", "witnessed_by", "image_url", "status", "event_name", "verify_url",
    }
    assert body["status"] == "active"
    assert body["event_name"] == event.event_name
    assert body["witnessed_by"] == "Carl Collector"
    assert body["verify_url"] == f"https://coa.example.com/cert/{issued.qr_id}"


def test_public_lookup_unknown(client):
    resp = client.get("/api/v1/public/certificates/doesnotexist")
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_revoked_certificate_still_verifiable(client, headers, owner, issued):
    resp = client.post(f"/api/v1/certificates/{issued.qr_id}/revoke", headers=headers(owner))
    assert resp.status_code == 200
    assert resp.json()["status"] == "revoked"

    public = client.get(f"/api/v1/public/certificates/{issued.qr_id}").json()
    assert public["status"] == "revoked"

    page = client.get(f"/api/v1/public/certificates/{issued.qr_id}/print")
    assert "REVOKED" in page.text


def test_printable_page_and_qr(client, issued):
    page = client.get(f"/api/v1/public/certificates/{issued.qr_id}/print")
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert "Hellboy" in page.text
    assert "data:image/png;base64," in page.text

    qr = client.get(f"/api/v1/public/certificates/{issued.qr_id}/qr.png")
    assert qr.status_code == 200
    assert qr.content[:4] == b"\x89PNG"


def test_manual_certificate_requires_fields(client, headers, owner):
    resp = client.post("/api/v1/certificates/", json={"comic_title": "X", "issue_number": "1"}, headers=headers(owner))
    assert resp.status_code == 422

    resp = client.post(
        "/api/v1/certificates/",
        json={"comic_title": "X", "issue_number": "1", "signed_by": "   "},
        headers=headers(owner),
    )
    assert resp.status_code == 422

    resp = client.post(
        "/api/v1/certificates/",
        json={"comic_title": "X-Men", "issue_number": "94", "signed_by": "Chris C.", "serial_number": "SN-1"},
        headers=headers(owner),
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert len(body["qr_id"]) >= 10
    assert body["request_id"] is None
    assert body["created_by"] == owner.id


def test_duplicate_serial_number_conflicts(client, headers, owner):
    body = {"comic_title": "A", "issue_number": "1", "signed_by": "B", "serial_number": "SN-DUP"}
    assert client.post("/api/v1/certificates/", json=body, headers=headers(owner)).status_code == 201
    resp = client.post("/api/v1/certificates/", json=body, headers=headers(owner))
    assert resp.status_code == 409
    assert resp.json()["code"] == "UNIQUE_VIOLATION"


def test_search_and_patch(client, headers, reviewer, issued):
    hits = client.get("/api/v1/certificates/?q=hellb", headers=headers(reviewer)).json()
    assert [c["qr_id"] for c in hits] == [issued.qr_id]
    assert client.get("/api/v1/certificates/?q=zzz", headers=headers(reviewer)).json() == []

    resp = client.patch(f"/api/v1/certificates/{issued.qr_id}", json={"signed_location": "Booth 7"}, headers=headers(reviewer))
    assert resp.status_code == 200
    assert resp.json()["signed_location"] == "Booth 7"

    resp = client.patch(f"/api/v1/certificates/{issued.qr_id}", json={"signed_by": ""}, headers=headers(reviewer))
    assert resp.status_code == 422


def test_replace_image(client, headers, owner, issued, storage):
    resp = client.post(
        f"/api/v1/certificates/{issued.qr_id}/image",
        files={"image": ("coa.jpg", b"jpeg-bytes", "image/jpeg")},
        headers=headers(owner),
    )
    assert resp.status_code == 200, resp.text
    url = resp.json()["image_url"]
    assert url.startswith("/api/v1/files/coa-images/")

    # bucket público: serve sem assinatura
    served = client.get(url)
    assert served.status_code == 200
    assert served.content == b"jpeg-bytes"


def test_certificate_routes_need_staff(client, headers, collector, artist, issued):
    for who in (collector, artist):
        assert client.get("/api/v1/certificates/", headers=headers(who)).status_code == 403
        assert client.post(f"/api/v1/certificates/{issued.qr_id}/revoke", headers=headers(who)).status_code == 403


def test_reconcile_endpoint(client, headers, owner, issued):
    resp = client.post("/api/v1/certificates/reconcile", headers=headers(owner))
    assert resp.status_code == 200
    assert resp.json() == {"repaired_request_ids": []}
