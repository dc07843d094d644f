"""Tests for :mod:`playergate.app.security.hashing`."""
import pytest

from playergate.app.security.hashing import (
    BcryptVerifier,
    Sha256Verifier,
    Verifier,
    constant_time_compare,
    get_verifier,
)


def test_sha256_is_deterministic():
    verifier = Sha256Verifier()
    assert verifier.hash("pw") == verifier.hash("pw")
    assert verifier.hash("pw") != verifier.hash("pw2")


def test_sha256_matches_stored_token_format():
    # Lowercase hex digest, same as tokens already in the database
    token = Sha256Verifier().hash("abc")
    assert token == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert len(Sha256Verifier().hash("a much longer secret " * 20)) == 64


def test_sha256_matches():
    verifier = Sha256Verifier()
    token = verifier.hash("hunter2")
    assert verifier.matches("hunter2", token)
    assert not verifier.matches("hunter3", token)
    assert not verifier.matches("hunter2", verifier.dummy_token)


def test_bcrypt_salts_and_matches():
    verifier = BcryptVerifier(rounds=4)
    first = verifier.hash("answer")
    second = verifier.hash("answer")
    assert first != second
    assert verifier.matches("answer", first)
    assert verifier.matches("answer", second)
    assert not verifier.matches("wrong", first)


def test_bcrypt_accepts_secrets_past_72_bytes():
    verifier = BcryptVerifier(rounds=4)
    long_secret = "x" * 100
    token = verifier.hash(long_secret)
    assert verifier.matches(long_secret, token)
    # Differences after byte 72 still count
    assert not verifier.matches("x" * 99 + "y", token)
    assert verifier.matches("pässwörd" * 20, verifier.hash("pässwörd" * 20))


def test_verifier_is_abstract():
    class HalfVerifier(Verifier):
        def hash(self, secret):
            return secret

    with pytest.raises(TypeError):
        Verifier()
    with pytest.raises(TypeError):
        HalfVerifier()


def test_bcrypt_rejects_sha256_tokens():
    sha_token = Sha256Verifier().hash("answer")
    assert not BcryptVerifier(rounds=4).matches("answer", sha_token)


def test_constant_time_compare():
    assert constant_time_compare("abc", "abc")
    assert not constant_time_compare("abc", "abd")
    assert not constant_time_compare("abc", "abcd")


def test_get_verifier():
    assert isinstance(get_verifier("sha256"), Sha256Verifier)
    verifier = get_verifier("bcrypt", bcrypt_rounds=5)
    assert isinstance(verifier, BcryptVerifier)
    assert verifier.rounds == 5
    with pytest.raises(ValueError):
        get_verifier("md5")
