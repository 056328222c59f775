# ishanya/core/security.py
import os
from typing import Optional
from passlib.context import CryptContext

# rounds are tunable through ENV
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# Optional secret pepper appended before hashing
_PEPPER = os.getenv("PASSWORD_PEPPER", "")

def _with_pepper(plain: str) -> str:
    return f"{plain}{_PEPPER}"

def hash_password(password: str) -> str:
    return _pwd.hash(_with_pepper(password))

def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return _pwd.verify(_with_pepper(plain_password), password_hash)
    except ValueError:
        # malformed or unknown hash format
        return False

def try_rehash_on_success(plain_password: str, password_hash: str) -> Optional[str]:
    """
    Returns a fresh hash when the password verifies and the stored hash uses
    an outdated policy (e.g. fewer rounds). Returns None otherwise.
    """
    if not verify_password(plain_password, password_hash):
        return None
    if _pwd.needs_update(password_hash):
        return hash_password(plain_password)
    return None
