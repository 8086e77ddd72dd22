# app/models/__init__.py
# Carrega módulos para registrar tabelas no metadata (alembic/env.py e testes)
from app.models.profile import Profile              # noqa: F401
from app.models.event import Event                  # noqa: F401
from app.models.certificate import Certificate, CertificateStatus  # noqa: F401
from app.models.coa_request import CoaRequest, RequestStatus      # noqa: F401
from app.models.artist_request import ArtistRequest  # noqa: F401
from app.models.tokens import RefreshToken          # noqa: F401

__all__ = [
    "Profile",
    "Event",
    "Certificate",
    "CertificateStatus",
    "CoaRequest",
    "RequestStatus",
    "ArtistRequest",
    "RefreshToken",
]
