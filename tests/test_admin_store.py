from __future__ import annotations

import pytest

from reviewhub.admins.service import (
    authenticate_admin,
    create_admin,
    deactivate_admin,
    get_admin_by_id,
    list_admin_actions,
    list_admins,
    log_admin_action,
    register_admin,
    update_admin,
)
from reviewhub.storage.errors import DuplicateRecordError
from reviewhub.storage.security import hash_password, verify_password


def _admin(session, email: str = "admin@example.com", **kwargs):
    kwargs.setdefault("name", "Ada")
    kwargs.setdefault("password", "correct-horse")
    kwargs.setdefault("admin_role", "validator_admin")
    kwargs.setdefault("account_status", "active")
    return create_admin(session, email=email, **kwargs)


def test_password_hash_round_trip() -> None:
    encoded = hash_password("s3cret-pass")
    assert encoded.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret-pass", encoded)
    assert not verify_password("wrong", encoded)
    assert not verify_password("s3cret-pass", None)
    assert not verify_password("s3cret-pass", "plaintext")


def test_active_admin_authenticates(session) -> None:
    admin = _admin(session)
    assert authenticate_admin(session, "admin@example.com", "correct-horse").id == admin.id
    assert authenticate_admin(session, "admin@example.com", "wrong") is None
    assert authenticate_admin(session, "missing@example.com", "correct-horse") is None


def test_suspended_admin_fails_with_correct_password(session) -> None:
    admin = _admin(session)
    assert deactivate_admin(session, admin.id) is True

    assert get_admin_by_id(session, admin.id).account_status == "suspended"
    assert authenticate_admin(session, "admin@example.com", "correct-horse") is None


def test_pending_admin_cannot_authenticate(session) -> None:
    _admin(session, account_status="pending")
    assert authenticate_admin(session, "admin@example.com", "correct-horse") is None


def test_upsert_keeps_password_and_status(session) -> None:
    original = _admin(session, account_status="suspended")
    updated = _admin(session, name="Ada L.", password="different-pass", admin_role="super_admin", country="NG")

    assert updated.id == original.id
    assert updated.name == "Ada L."
    assert updated.admin_role == "super_admin"
    assert updated.country == "NG"
    assert updated.account_status == "suspended"
    assert verify_password("correct-horse", updated.password_hash)


def test_register_refuses_existing_email(session) -> None:
    register_admin(session, email="new@example.com", name="N", password="password-1", admin_role="validator_admin")
    with pytest.raises(DuplicateRecordError):
        register_admin(session, email="new@example.com", name="N", password="password-1", admin_role="validator_admin")


def test_update_admin_applies_known_fields(session) -> None:
    admin = _admin(session)

    updated = update_admin(session, admin.id, country="KE", password_hash="ignored")
    assert updated.country == "KE"
    assert update_admin(session, 9999, name="Nobody") is None
    with pytest.raises(ValueError):
        update_admin(session, admin.id, admin_role="owner")
    with pytest.raises(ValueError):
        _admin(session, email="bad@example.com", admin_role="owner")


def test_admin_actions_newest_first(session) -> None:
    first = _admin(session)
    second = _admin(session, email="second@example.com")
    log_admin_action(session, admin_id=first.id, action_type="validate_submission", target_id="s1")
    log_admin_action(session, admin_id=first.id, action_type="reject_submission", target_id="s2")
    log_admin_action(session, admin_id=second.id, action_type="validate_submission", target_id="s3")

    actions = list_admin_actions(session, admin_id=first.id)
    assert [action.target_id for action in actions] == ["s2", "s1"]
    assert len(list_admin_actions(session, limit=2)) == 2
    assert len(list_admins(session)) == 2


def test_held_admin_reflects_suspension_and_updates(session) -> None:
    held = _admin(session, email="held@example.com")
    assert authenticate_admin(session, "held@example.com", "correct-horse") is held

    deactivate_admin(session, held.id)
    assert held.account_status == "suspended"
    assert authenticate_admin(session, "held@example.com", "correct-horse") is None

    update_admin(session, held.id, account_status="active", country="GH")
    assert held.account_status == "active"
    assert held.country == "GH"
    assert authenticate_admin(session, "held@example.com", "correct-horse").id == held.id
