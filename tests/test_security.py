"""Tests for password hashing."""

import pytest

from bookcom_catalog.app.core.security import hash_password, verify_password


def test_hash_round_trip():
    hashed = hash_password("secret1")

    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)


def test_salt_differs_per_hash():
    assert hash_password("secret1") != hash_password("secret1")


@pytest.mark.parametrize("stored", ["", "no-dollar", "zz$zz", None])
def test_malformed_hash_is_rejected(stored):
    assert verify_password("secret1", stored) is False
