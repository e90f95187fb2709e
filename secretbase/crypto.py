import base64
import hmac
import os
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.backends import default_backend

DEFAULT_KDF_ITERS = 200_000
BACKEND = default_backend()
SCHEME = "pbkdf2_sha256"

def derive_key(password: str, salt: bytes, kdf_iters: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=kdf_iters,
        backend=BACKEND
    )
    return kdf.derive(password.encode("utf-8"))

def hash_password(password: str, kdf_iters: int = DEFAULT_KDF_ITERS) -> str:
    """Encode a password as ``pbkdf2_sha256$<iters>$<salt>$<hash>``."""
    salt = os.urandom(16)
    key = derive_key(password, salt, kdf_iters)
    return "$".join([
        SCHEME,
        str(kdf_iters),
        base64.urlsafe_b64encode(salt).decode("ascii"),
        base64.urlsafe_b64encode(key).decode("ascii"),
    ])

def verify_password(password: str, encoded: str) -> bool:
    """Check ``password`` against a hash made by ``hash_password``.

    There is no login command; this exists to audit stored user hashes.
    """
    try:
        scheme, iters, salt_b64, key_b64 = encoded.split("$")
    except ValueError:
        return False
    if scheme != SCHEME:
        return False
    salt = base64.urlsafe_b64decode(salt_b64.encode("ascii"))
    expected = base64.urlsafe_b64decode(key_b64.encode("ascii"))
    return hmac.compare_digest(derive_key(password, salt, int(iters)), expected)
