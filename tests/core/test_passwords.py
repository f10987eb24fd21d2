"""Tests for password hashing."""
from core.passwords import hash_password, password_too_long, verify_password


def test__hash_password__is_salted() -> None:
    assert hash_password("secret1") != hash_password("secret1")


def test__verify_password__accepts_correct_and_rejects_wrong() -> None:
    hashed = hash_password("secret1")

    assert verify_password("secret1", hashed) is True
    assert verify_password("secret2", hashed) is False


def test__verify_password__malformed_hash_is_a_mismatch() -> None:
    assert verify_password("secret1", "not-a-bcrypt-hash") is False


def test__password_too_long__counts_utf8_bytes() -> None:
    assert password_too_long("p" * 72) is False
    assert password_too_long("p" * 73) is True
    # 24 three-byte characters fit exactly; one more does not
    assert password_too_long("€" * 24) is False
    assert password_too_long("€" * 25) is True


def test__verify_password__over_long_password_is_a_mismatch() -> None:
    hashed = hash_password("p" * 72)

    assert verify_password("p" * 80, hashed) is False
