from datetime import datetime, timedelta, timezone

from jose import jwt

from app.config.security import SecurityConfig
from app.utils.permissions import Tier
from app.utils.security import (
    SessionIdentity,
    create_session_token,
    hash_password,
    verify_password,
    verify_session_token,
)

IDENTITY = SessionIdentity(id=7, username="rahul", role="USER", tier=Tier.USER)


def test_issue_then_verify_returns_identity():
    token = create_session_token(IDENTITY)
    assert verify_session_token(token) == IDENTITY


def test_super_admin_tier_is_derived_on_verify():
    token = create_session_token(SessionIdentity(id=1, username="nkc", role="ADMIN", tier=Tier.SUPER_ADMIN))
    assert verify_session_token(token).tier == Tier.SUPER_ADMIN


def test_token_expires_after_ttl():
    issued = datetime.now(timezone.utc) - timedelta(hours=SecurityConfig.SESSION['ttl_hours'], minutes=1)
    token = create_session_token(IDENTITY, now=issued)
    assert verify_session_token(token) is None


def test_token_is_valid_just_before_ttl():
    issued = datetime.now(timezone.utc) - timedelta(hours=SecurityConfig.SESSION['ttl_hours'] - 1)
    assert verify_session_token(create_session_token(IDENTITY, now=issued)) == IDENTITY


def test_foreign_signature_is_rejected():
    payload = {
        "sub": "7",
        "username": "rahul",
        "role": "ADMIN",
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }
    forged = jwt.encode(payload, "some-other-key", algorithm="HS256")
    assert verify_session_token(forged) is None


def test_tampered_payload_is_rejected():
    header, payload, signature = create_session_token(IDENTITY).split(".")
    other = create_session_token(SessionIdentity(id=8, username="sarada", role="ADMIN", tier=Tier.ADMIN))
    assert verify_session_token(".".join([header, other.split(".")[1], signature])) is None


def test_malformed_or_missing_tokens_are_rejected():
    assert verify_session_token(None) is None
    assert verify_session_token("") is None
    assert verify_session_token("not-a-token") is None


def test_unknown_role_is_rejected():
    payload = {
        "sub": "7",
        "username": "rahul",
        "role": "ROOT",
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }
    token = jwt.encode(payload, SecurityConfig.SESSION['secret_key'], algorithm=SecurityConfig.SESSION['algorithm'])
    assert verify_session_token(token) is None


def test_passwords_are_salted_hashes():
    first = hash_password("password123")
    second = hash_password("password123")
    assert first != "password123"
    assert first != second
    assert verify_password("password123", first)
    assert not verify_password("password124", first)
