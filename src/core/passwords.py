"""Password hashing with bcrypt."""
import bcrypt

MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes and recent releases reject longer input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    """True when the UTF-8 encoding exceeds what bcrypt accepts."""
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash a plaintext password with a fresh salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
