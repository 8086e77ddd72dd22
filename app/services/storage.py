# app/services/storage.py
"""
Object storage local (filesystem) com buckets públicos e privados.

Layout: <root>/<bucket>/<path>. Buckets privados só são servidos com URL
assinada (HMAC-SHA256 sobre "bucket/path:expires").
"""
from __future__ import annotations

import hashlib
import hmac
import logging
import mimetypes
import os
import time
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, urlencode

logger = logging.getLogger(__name__)

BUCKET_PROOFS = "request-proofs"      # privado
BUCKET_BOOKS = "request-books"        # público
BUCKET_COA_IMAGES = "coa-images"      # público

PUBLIC_BUCKETS = frozenset({BUCKET_BOOKS, BUCKET_COA_IMAGES})
KNOWN_BUCKETS = PUBLIC_BUCKETS | {BUCKET_PROOFS}


class StorageError(Exception):
    pass


class ObjectExists(StorageError):
    pass


class ObjectNotFound(StorageError):
    pass


class LocalStorage:
    def __init__(self, root: str, base_url: str, secret: str):
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")
        self._secret = secret.encode()
        self.root.mkdir(parents=True, exist_ok=True)

    # -------------------------- paths --------------------------

    def _full_path(self, bucket: str, path: str) -> Path:
        if bucket not in KNOWN_BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        bucket_root = (self.root / bucket).resolve()
        full = (bucket_root / path).resolve()
        # bloqueia ../ (path traversal)
        try:
            full.relative_to(bucket_root)
        except ValueError as e:
            raise StorageError(f"Invalid object path: {path}") from e
        if full == bucket_root:
            raise StorageError("Empty object path")
        return full

    # -------------------------- escrita --------------------------

    def upload(self, bucket: str, path: str, data: bytes, *, upsert: bool = False) -> str:
        target = self._full_path(bucket, path)
        if target.exists() and not upsert:
            raise ObjectExists(f"{bucket}/{path} already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".part")
        with open(tmp, "wb") as f:
            f.write(data)
        os.replace(tmp, target)
        logger.debug("stored %s/%s (%d bytes)", bucket, path, len(data))
        return path

    def remove(self, bucket: str, path: str) -> bool:
        target = self._full_path(bucket, path)
        if not target.exists():
            return False
        target.unlink()
        return True

    def list_prefix(self, bucket: str, prefix: str) -> List[str]:
        """Caminhos (relativos ao bucket) dos arquivos sob <bucket>/<prefix>/."""
        target = self._full_path(bucket, prefix)
        if not target.exists():
            return []
        bucket_root = (self.root / bucket).resolve()
        if target.is_file():
            return [target.relative_to(bucket_root).as_posix()]
        return sorted(
            p.relative_to(bucket_root).as_posix()
            for p in target.rglob("*")
            if p.is_file() and not p.name.endswith(".part")
        )

    # -------------------------- leitura --------------------------

    def exists(self, bucket: str, path: str) -> bool:
        return self._full_path(bucket, path).is_file()

    def open(self, bucket: str, path: str) -> Path:
        target = self._full_path(bucket, path)
        if not target.is_file():
            raise ObjectNotFound(f"{bucket}/{path}")
        return target

    @staticmethod
    def guess_type(path: str) -> str:
        return mimetypes.guess_type(path)[0] or "application/octet-stream"

    # -------------------------- URLs --------------------------

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.base_url}/{bucket}/{quote(path)}"

    def _sign(self, bucket: str, path: str, expires: int) -> str:
        msg = f"{bucket}/{path}:{expires}".encode()
        return hmac.new(self._secret, msg, hashlib.sha256).hexdigest()

    def create_signed_url(self, bucket: str, path: str, ttl_seconds: int, *, now: Optional[float] = None) -> str:
        if not self.exists(bucket, path):
            raise ObjectNotFound(f"{bucket}/{path}")
        expires = int((now if now is not None else time.time()) + ttl_seconds)
        query = urlencode({"expires": expires, "signature": self._sign(bucket, path, expires)})
        return f"{self.get_public_url(bucket, path)}?{query}"

    def verify_signature(self, bucket: str, path: str, expires: int, signature: str, *, now: Optional[float] = None) -> bool:
        current = now if now is not None else time.time()
        if expires < current:
            return False
        expected = self._sign(bucket, path, expires)
        return hmac.compare_digest(expected, signature or "")
