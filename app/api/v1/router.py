# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1 import (
    auth,
    me,
    events,
    artist,
    requests,
    certificates,
    profiles,
    artist_requests,
    public,
    files,
)

api_router = APIRouter()

# -------- rotas públicas --------
api_router.include_router(auth.router,            prefix="/auth",            tags=["auth"])
api_router.include_router(public.router,          prefix="/public",          tags=["public"])
api_router.include_router(files.router,           prefix="/files",           tags=["files"])

# -------- colecionador --------
api_router.include_router(me.router,              prefix="/me",              tags=["me"])
api_router.include_router(requests.submit_router, prefix="/events",          tags=["requests"])

# -------- artista --------
api_router.include_router(artist.router,          prefix="/artist",          tags=["artist"])

# -------- staff --------
api_router.include_router(events.router,          prefix="/events",          tags=["events"])
api_router.include_router(requests.router,        prefix="/requests",        tags=["requests"])
api_router.include_router(certificates.router,    prefix="/certificates",    tags=["certificates"])
api_router.include_router(profiles.router,        prefix="/profiles",        tags=["profiles"])
api_router.include_router(artist_requests.router, prefix="/artist-requests", tags=["artist-requests"])
