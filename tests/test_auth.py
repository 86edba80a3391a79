import logging

import jwt

from core.auth import SessionClaims, TokenCodec, hash_password, verify_password
from scripts.hash_password import main as hash_password_cli

T = 1_700_000_000


def test_issue_then_verify_recovers_subject(codec):
    token = codec.issue("7", T, 3600)
    claims = codec.verify(token, T + 3599)
    assert claims == SessionClaims(sub="7", iat=T, exp=T + 3600)


def test_integer_subject_is_issued_as_string(codec):
    claims = codec.verify(codec.issue(42, T, 60), T)
    assert claims.sub == "42"


def test_token_expires_after_ttl(codec):
    token = codec.issue("7", T, 3600)
    assert codec.verify(token, T + 3600) is None
    assert codec.verify(token, T + 3601) is None


def test_token_signed_with_other_secret_is_rejected(codec):
    token = TokenCodec(b"another-secret").issue("7", T, 3600)
    assert codec.verify(token, T) is None


def test_tampered_and_garbage_tokens_are_rejected(codec):
    token = codec.issue("7", T, 3600)
    head, payload, sig = token.split(".")
    assert codec.verify(f"{head}.{payload}.{sig[::-1]}", T) is None
    assert codec.verify("not-a-token", T) is None
    assert codec.verify("", T) is None


def test_token_without_subject_is_rejected(codec):
    token = jwt.encode({"iat": T, "exp": T + 60}, b"test-secret", algorithm="HS256")
    assert codec.verify(token, T) is None


def test_rejection_reason_is_logged(codec, caplog):
    token = codec.issue("7", T, 10)
    with caplog.at_level(logging.INFO, logger="core.auth"):
        codec.verify(token, T + 20)
        codec.verify(token + "x", T)
    messages = [r.getMessage() for r in caplog.records]
    assert any("expired" in m for m in messages)
    assert any("bad signature" in m for m in messages)
    assert not any(token in m for m in messages)


def test_password_digest_roundtrip():
    digest = hash_password("correct horse")
    assert "correct horse" not in digest
    assert digest.startswith("pbkdf2_sha256$")
    assert verify_password("correct horse", digest)
    assert not verify_password("wrong horse", digest)


def test_password_digests_are_salted():
    assert hash_password("same") != hash_password("same")


def test_malformed_digest_never_verifies():
    assert not verify_password("x", "")
    assert not verify_password("x", "plaintext")
    assert not verify_password("x", "md5$1$salt$hash")
    assert not verify_password("x", "pbkdf2_sha256$notanumber$salt$hash")


def test_hash_password_cli_prints_usable_digest(capsys):
    hash_password_cli(["admin-pass"])
    digest = capsys.readouterr().out.strip()
    assert verify_password("admin-pass", digest)
