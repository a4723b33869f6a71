"""Password hashing with bcrypt.

bcrypt only looks at the first 72 bytes of a secret and bcrypt>=5 raises on
longer input, so registration caps passwords at 72 UTF-8 bytes and
verification treats an over-long candidate as a mismatch.
"""

import bcrypt

MAX_PASSWORD_BYTES = 72


def password_fits(plain: str) -> bool:
    return len(plain.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(plain: str) -> str:
    hashed: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not password_fits(plain):
        return False
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
