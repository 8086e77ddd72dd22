# app/api/v1/me.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_profile, get_db
from app.schemas.certificate import Certificate
from app.schemas.coa_request import CoaRequestOut, CollectorDashboard
from app.schemas.profile import ProfileOut
from app.services import profiles as profile_service

router = APIRouter()

@router.get("", response_model=ProfileOut)
def me(profile=Depends(get_current_profile)):
    return profile

@router.get("/requests", response_model=List[CoaRequestOut])
def my_requests(db: Session = Depends(get_db), profile=Depends(get_current_profile)):
    return profile_service.my_requests(db, profile)

@router.get("/certificates", response_model=List[Certificate])
def my_certificates(db: Session = Depends(get_db), profile=Depends(get_current_profile)):
    return profile_service.my_certificates(db, profile)

@router.get("/dashboard", response_model=CollectorDashboard)
def my_dashboard(db: Session = Depends(get_db), profile=Depends(get_current_profile)):
    return profile_service.dashboard(db, profile)
