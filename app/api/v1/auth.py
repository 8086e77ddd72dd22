# app/api/v1/auth.py
from __future__ import annotations
from urllib.parse import parse_qs

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.security_password import password_policy_ok
from app.schemas.profile import ProfileOut, SignupIn
from app.schemas.token import AuthResponse
from app.services import profiles as profile_service

router = APIRouter()

# ---------- helpers ----------
def _auth_response(profile, tokens: dict) -> AuthResponse:
    return AuthResponse(**tokens, user=ProfileOut.model_validate(profile))

def _login(db: Session, email: str, password: str) -> AuthResponse:
    if not email or not password:
        raise HTTPException(status_code=400, detail="Email and password are required.")
    if not password_policy_ok(password):
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    profile = profile_service.authenticate(db, email, password)
    if not profile:
        raise HTTPException(status_code=401, detail="Invalid credentials.")
    return _auth_response(profile, profile_service.issue_tokens(db, profile))

async def _extract_credentials_from_request(request: Request) -> tuple[str, str]:
    ct = request.headers.get("content-type", "").lower()
    if ct.startswith("application/json"):
        data = await request.json()
        if isinstance(data, dict):
            email = profile_service.normalize_email(data.get("username") or data.get("email") or "")
            password = data.get("password") or ""
            if email and password:
                return email, password
    else:
        raw = (await request.body()).decode()
        parsed = parse_qs(raw, keep_blank_values=True)
        email = profile_service.normalize_email(
            (parsed.get("username", [""])[0]) or (parsed.get("email", [""])[0]) or ""
        )
        password = (parsed.get("password", [""])[0]) or ""
        if email and password:
            return email, password
    raise HTTPException(
        status_code=422,
        detail=[{"loc": ["body"], "msg": "Expected JSON {email,password} or form-urlencoded username/password", "type": "value_error"}],
    )

def _get_token_from_body_or_query(token_body: str | None, token_query: str | None) -> str:
    tok = token_body or token_query
    if not tok:
        raise HTTPException(status_code=422, detail=[{"loc": ["token"], "msg": "Field required", "type": "value_error.missing"}])
    return tok

# ---------- endpoints ----------
@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(body: SignupIn, db: Session = Depends(get_db)):
    profile = profile_service.signup(db, body)
    return _auth_response(profile, profile_service.issue_tokens(db, profile))

@router.post("/login", response_model=AuthResponse)
async def login(request: Request, db: Session = Depends(get_db)):
    email, password = await _extract_credentials_from_request(request)
    return _login(db, email, password)

@router.post("/token", response_model=AuthResponse)
def login_oauth2_form(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return _login(db, profile_service.normalize_email(form.username), form.password or "")

@router.post("/refresh", response_model=AuthResponse)
def refresh(
    token: str | None = Body(default=None, embed=True),        # {"token":"<refresh>"}
    token_q: str | None = Query(default=None, alias="token"),  # ?token=<refresh>
    db: Session = Depends(get_db),
):
    rotated = profile_service.rotate_refresh(db, _get_token_from_body_or_query(token, token_q))
    if not rotated:
        raise HTTPException(status_code=401, detail="Invalid token")
    profile, tokens = rotated
    return _auth_response(profile, tokens)

@router.post("/logout")
def logout(
    token: str | None = Body(default=None, embed=True),
    token_q: str | None = Query(default=None, alias="token"),
    db: Session = Depends(get_db),
):
    profile_service.revoke_refresh(db, _get_token_from_body_or_query(token, token_q))
    return {"ok": True}
