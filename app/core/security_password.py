# app/core/security_password.py
from __future__ import annotations
from typing import Tuple
from passlib.context import CryptContext

pwd_context = CryptContext(
    schemes=["argon2", "bcrypt_sha256"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=19456,
    argon2__parallelism=1,
)

MIN_PASSWORD_LEN = 8
MAX_PASSWORD_LEN = 128

def password_policy_ok(password: str) -> bool:
    return isinstance(password, str) and MIN_PASSWORD_LEN <= len(password) <= MAX_PASSWORD_LEN

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_and_maybe_upgrade(plain: str, stored_hash: str | None) -> Tuple[bool, str | None]:
    """Retorna (ok, novo_hash); novo_hash só quando o esquema ficou obsoleto."""
    if not stored_hash:
        return False, None
    ok = pwd_context.verify(plain, stored_hash)
    if not ok:
        return False, None
    if pwd_context.needs_update(stored_hash):
        return True, pwd_context.hash(plain)
    return True, None
