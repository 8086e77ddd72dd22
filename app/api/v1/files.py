# app/api/v1/files.py
# serve o object storage local; bucket privado exige URL assinada
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from app.api.deps import get_storage
from app.services.storage import KNOWN_BUCKETS, PUBLIC_BUCKETS, LocalStorage, ObjectNotFound, StorageError

router = APIRouter()

@router.get("/{bucket}/{path:path}")
def get_file(
    bucket: str,
    path: str,
    expires: Optional[int] = Query(None),
    signature: Optional[str] = Query(None),
    storage: LocalStorage = Depends(get_storage),
):
    if bucket not in KNOWN_BUCKETS:
        raise HTTPException(status_code=404, detail="Unknown bucket")
    if bucket not in PUBLIC_BUCKETS:
        if expires is None or not signature or not storage.verify_signature(bucket, path, expires, signature):
            raise HTTPException(status_code=403, detail="Invalid or expired signature")
    try:
        target = storage.open(bucket, path)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="File not found")
    except StorageError:
        raise HTTPException(status_code=400, detail="Invalid path")
    return FileResponse(target, media_type=storage.guess_type(path))
