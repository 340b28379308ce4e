"""Tests for password hashing."""

from nutrition_planner.services.passwords import PasswordHasher


def test_hash_and_verify() -> None:
    hasher = PasswordHasher(rounds=4)

    password_hash = hasher.hash("hunter22")

    assert password_hash != "hunter22"
    assert hasher.verify("hunter22", password_hash)
    assert not hasher.verify("hunter23", password_hash)


def test_hashes_are_salted() -> None:
    hasher = PasswordHasher(rounds=4)

    assert hasher.hash("hunter22") != hasher.hash("hunter22")


def test_verify_against_garbage_hash_is_false() -> None:
    assert PasswordHasher(rounds=4).verify("hunter22", "not-a-bcrypt-hash") is False
