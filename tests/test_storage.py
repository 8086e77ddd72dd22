import pytest

from app.services.storage import (
    BUCKET_BOOKS,
    BUCKET_PROOFS,
    LocalStorage,
    ObjectExists,
    ObjectNotFound,
    StorageError,
)


def test_upload_and_public_url(storage):
    storage.upload(BUCKET_BOOKS, "7/abc/book 1.jpg", b"data")
    assert storage.exists(BUCKET_BOOKS, "7/abc/book 1.jpg")
    assert storage.get_public_url(BUCKET_BOOKS, "7/abc/book 1.jpg") == "/api/v1/files/request-books/7/abc/book%201.jpg"


def test_upload_without_upsert_refuses_overwrite(storage):
    storage.upload(BUCKET_BOOKS, "a.jpg", b"1")
    with pytest.raises(ObjectExists):
        storage.upload(BUCKET_BOOKS, "a.jpg", b"2")
    storage.upload(BUCKET_BOOKS, "a.jpg", b"3", upsert=True)
    assert storage.open(BUCKET_BOOKS, "a.jpg").read_bytes() == b"3"


@pytest.mark.parametrize("path", ["../escape.jpg", "x/../../escape.jpg", ""])
def test_rejects_paths_outside_bucket(storage, path):
    with pytest.raises(StorageError):
        storage.upload(BUCKET_PROOFS, path, b"x")


def test_unknown_bucket(storage):
    with pytest.raises(StorageError):
        storage.upload("secrets", "a.jpg", b"x")


def test_signed_url_roundtrip_and_expiry(storage):
    storage.upload(BUCKET_PROOFS, "1/r/proof.jpg", b"x")
    url = storage.create_signed_url(BUCKET_PROOFS, "1/r/proof.jpg", 60, now=1_000)
    expires = 1_060
    sig = url.split("signature=")[1]

    assert storage.verify_signature(BUCKET_PROOFS, "1/r/proof.jpg", expires, sig, now=1_030)
    assert not storage.verify_signature(BUCKET_PROOFS, "1/r/proof.jpg", expires, sig, now=1_061)
    assert not storage.verify_signature(BUCKET_PROOFS, "1/r/other.jpg", expires, sig, now=1_030)
    assert not storage.verify_signature(BUCKET_PROOFS, "1/r/proof.jpg", expires + 1, sig, now=1_030)


def test_signature_depends_on_secret(tmp_path):
    a = LocalStorage(str(tmp_path / "a"), "/f", "secret-a")
    b = LocalStorage(str(tmp_path / "b"), "/f", "secret-b")
    a.upload(BUCKET_PROOFS, "p.jpg", b"x")
    sig = a.create_signed_url(BUCKET_PROOFS, "p.jpg", 60, now=0).split("signature=")[1]
    assert not b.verify_signature(BUCKET_PROOFS, "p.jpg", 60, sig, now=0)


def test_signed_url_for_missing_object(storage):
    with pytest.raises(ObjectNotFound):
        storage.create_signed_url(BUCKET_PROOFS, "missing.jpg", 60)


def test_list_prefix(storage):
    storage.upload(BUCKET_PROOFS, "5/a/1.jpg", b"x")
    storage.upload(BUCKET_PROOFS, "5/b/2.jpg", b"x")
    storage.upload(BUCKET_PROOFS, "6/a/3.jpg", b"x")
    assert storage.list_prefix(BUCKET_PROOFS, "5") == ["5/a/1.jpg", "5/b/2.jpg"]
    assert storage.list_prefix(BUCKET_PROOFS, "7") == []
    assert storage.remove(BUCKET_PROOFS, "5/a/1.jpg")
    assert storage.list_prefix(BUCKET_PROOFS, "5") == ["5/b/2.jpg"]


def test_files_route_rejects_expired_signature(client, storage):
    storage.upload(BUCKET_PROOFS, "1/p.jpg", b"x")
    url = storage.create_signed_url(BUCKET_PROOFS, "1/p.jpg", 60, now=0)
    assert client.get(url).status_code == 403
    assert client.get("/api/v1/files/unknown/x.jpg").status_code == 404
