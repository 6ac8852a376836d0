import hashlib
import secrets
from functools import lru_cache

from passlib.context import CryptContext

from config.settings import get_settings


@lru_cache()
def _context_for_rounds(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def _password_ctx() -> CryptContext:
    """bcrypt context for the current BCRYPT_ROUNDS, so reload_settings() takes effect"""
    return _context_for_rounds(get_settings().BCRYPT_ROUNDS)


def hash_password(plain_password: str) -> str:
    return _password_ctx().hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return _password_ctx().verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def generate_reset_token() -> str:
    """Opaque recovery token with 256 bits of entropy"""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def dummy_verify() -> None:
    """Spend the same hashing time as a real check when no account matched"""
    _password_ctx().dummy_verify()
