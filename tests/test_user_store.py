from __future__ import annotations

from reviewhub.storage.security import verify_password
from reviewhub.users.service import create_user, ensure_user, get_user_by_email, get_user_by_id, list_users


def test_create_user_upserts_name(session) -> None:
    created = create_user(session, email="v@example.com", name="Vee", password="pw-123456")
    again = create_user(session, email="v@example.com", name="Vee Updated", password="other")

    assert again.id == created.id
    assert again.name == "Vee Updated"
    assert verify_password("pw-123456", again.password_hash)
    assert get_user_by_id(session, created.id).email == "v@example.com"


def test_ensure_user_is_idempotent(session) -> None:
    ensure_user(session, "w@example.com")
    ensure_user(session, "w@example.com")
    session.commit()

    assert get_user_by_email(session, "w@example.com") is not None
    assert len(list_users(session)) == 1
    assert get_user_by_email(session, "missing@example.com") is None
