"""
services/password_hashing.py – Salted credential tokens.

Tokens are self-describing strings::

    pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>

so verification needs nothing but the stored token and the submitted password.
"""

import hashlib
import hmac
import secrets

# ── Configuration ────────────────────────────────────────────────────────────
ALGORITHM: str = "pbkdf2_sha256"
PBKDF2_ITERATIONS: int = 200_000
SALT_BYTES: int = 16


def derive_token(password: str, *, salt: str = "", iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash *password* with a fresh random salt unless *salt* is given."""
    salt = salt or secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
    )
    return f"{ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_token(password: str, token: str) -> bool:
    """Return True when *password* hashes to *token*; malformed tokens never match."""
    try:
        algorithm, iterations, salt, _digest = token.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != ALGORITHM or rounds <= 0:
        return False
    candidate = derive_token(password, salt=salt, iterations=rounds)
    return hmac.compare_digest(candidate, token)
