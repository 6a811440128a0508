"""
Smoke tests for the SQLRepository against a temporary SQLite database.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
import time

import pytest

from facescan.repositories.sql_repository import DuplicateUserError


def _create(repository, email="alice@example.com", username="alice", token="tok-1", ttl_hours=24):
    return repository.create_user(
        email=email,
        username=username,
        password_hash="hash",
        verification_token=token,
        verification_token_expires_at=datetime.now(timezone.utc) + timedelta(hours=ttl_hours),
    )


def test_create_and_lookup_user(repository):
    user = _create(repository)
    assert user.id is not None
    assert user.is_verified is False
    assert repository.get_user(user.id).email == "alice@example.com"
    assert repository.get_user_by_email("alice@example.com").username == "alice"
    assert repository.find_by_email_or_username("nobody@example.com", "alice").id == user.id
    assert repository.find_by_email_or_username("alice@example.com", "nobody").id == user.id
    assert repository.find_by_email_or_username("nobody@example.com", "nobody") is None


def test_email_or_username_lookup_returns_verified_match_first(repository):
    pending = _create(repository, email="u@example.com", username="pending", token="tok-u")
    confirmed = _create(repository, email="v@example.com", username="confirmed", token="tok-v")
    repository.mark_verified(confirmed.id)

    assert repository.find_by_email_or_username("u@example.com", "confirmed").id == confirmed.id
    assert repository.find_by_email_or_username("u@example.com", "nobody").id == pending.id


def test_login_lookup_matches_username_or_lowercased_email(repository):
    user = _create(repository)
    assert repository.find_by_login("alice").id == user.id
    assert repository.find_by_login("Alice@Example.com").id == user.id
    assert repository.find_by_login("ALICE") is None


@pytest.mark.parametrize("email, username", [("alice@example.com", "other"), ("other@example.com", "alice")])
def test_duplicate_email_or_username_is_rejected(repository, email, username):
    _create(repository)
    with pytest.raises(DuplicateUserError):
        _create(repository, email=email, username=username, token="tok-2")


def test_token_lookup_requires_exact_match_and_live_expiry(repository):
    user = _create(repository, token="tok-live")
    now = datetime.now(timezone.utc)
    assert repository.find_by_verification_token("tok-live", now).id == user.id
    assert repository.find_by_verification_token("tok-liv", now) is None
    assert repository.find_by_verification_token("tok-live", now + timedelta(hours=25)) is None

    repository.set_reset_token(user.id, "reset-1", now + timedelta(hours=1))
    assert repository.find_by_reset_token("reset-1", now).id == user.id
    assert repository.find_by_reset_token("reset-1", now + timedelta(hours=2)) is None


def test_mark_verified_clears_token_and_bumps_updated_at(repository):
    user = _create(repository)
    before = repository.get_user(user.id).updated_at
    time.sleep(0.01)
    repository.mark_verified(user.id)
    after = repository.get_user(user.id)
    assert after.is_verified is True
    assert after.verification_token is None
    assert after.verification_token_expires_at is None
    assert after.updated_at > before
    assert after.created_at == user.created_at


def test_replace_password_consumes_reset_token(repository):
    user = _create(repository)
    repository.set_reset_token(user.id, "reset-1", datetime.now(timezone.utc) + timedelta(hours=1))
    repository.replace_password(user.id, "new-hash")
    stored = repository.get_user(user.id)
    assert stored.password_hash == "new-hash"
    assert stored.reset_token is None
    assert stored.reset_token_expires_at is None


def test_api_key_crud_is_scoped_to_owner(repository):
    alice = _create(repository)
    bob = _create(repository, email="bob@example.com", username="bob", token="tok-b")

    key = repository.create_api_key(alice.id, "ci", "hv_live_sk_" + "a" * 32, ["read"])
    assert [k.id for k in repository.list_api_keys(alice.id)] == [key.id]
    assert repository.list_api_keys(bob.id) == []

    assert repository.regenerate_api_key(bob.id, key.id, "hv_live_sk_" + "b" * 32) is None
    rotated = repository.regenerate_api_key(alice.id, key.id, "hv_live_sk_" + "c" * 32)
    assert rotated.key.endswith("c" * 32)
    assert rotated.last_used is None

    assert repository.delete_api_key(bob.id, key.id) is False
    assert repository.delete_api_key(alice.id, key.id) is True
    assert repository.list_api_keys(alice.id) == []


def test_upsert_profile_keeps_one_row_per_user(repository):
    user = _create(repository)
    values = dict(
        first_name="Alice",
        last_name="Smith",
        email="alice@example.com",
        date_of_birth=date(1990, 5, 1),
        sex="female",
        height=165.0,
        weight=60.0,
    )
    assert repository.get_profile(user.id) is None

    first, created = repository.upsert_profile(user.id, values)
    assert created is True
    second, created = repository.upsert_profile(user.id, {**values, "weight": 62.5})
    assert created is False
    assert second.id == first.id
    assert repository.get_profile(user.id).weight == 62.5
    assert repository.get_profile(user.id).created_at == first.created_at
