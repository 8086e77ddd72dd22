# app/api/v1/artist_requests.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.rbac import require_staff
from app.schemas.artist_request import ArtistDecisionIn, ArtistRequestOut
from app.services import profiles as profile_service
from app.services import workflow

router = APIRouter()

@router.get("/", response_model=List[ArtistRequestOut])
def list_artist_requests(
    status_: Optional[str] = Query(None, alias="status", pattern="^(pending|approved|rejected)$"),
    db: Session = Depends(get_db),
    staff=Depends(require_staff),
):
    return profile_service.list_artist_requests(db, staff, status_)

@router.post("/{artist_request_id}/decision", response_model=ArtistRequestOut)
def decide(artist_request_id: int, body: ArtistDecisionIn, db: Session = Depends(get_db), staff=Depends(require_staff)):
    return workflow.review_artist_onboarding(db, staff, artist_request_id, body.decision)
