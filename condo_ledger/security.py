"""
Password verifiers.

A verifier is `pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>`.
The iteration count travels with the verifier, so raising the cost in
settings only affects passwords set afterwards.

An empty or malformed verifier never matches. Accounts created without a
password (the synthesized legacy owner) therefore cannot log in.
"""

import hashlib
import hmac
import secrets


ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 600_000
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
    )


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Derive a fresh salted verifier for a password."""
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, verifier: str) -> bool:
    """Check a password against a stored verifier in constant time."""
    if not password or not verifier:
        return False

    try:
        algorithm, iterations, salt_hex, digest_hex = verifier.split("$")
        if algorithm != ALGORITHM:
            return False
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
        rounds = int(iterations)
    except ValueError:
        return False

    if rounds < 1 or not salt or not expected:
        return False

    return hmac.compare_digest(_derive(password, salt, rounds), expected)
