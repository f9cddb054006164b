from __future__ import annotations

from datetime import timedelta

from reviewhub.media.stores import audio_store, entity_payload, store_for_file_type, video_store
from reviewhub.storage.models import as_utc
from reviewhub.submissions.service import create_submission, get_submission


OWNER = "owner@example.com"


def _clip(session, submission_id: str, user_email: str = OWNER):
    return create_submission(
        session,
        submission_id=submission_id,
        user_email=user_email,
        file_name=f"{submission_id}.mp4",
        file_type="video",
        file_size=4096,
        preview="https://cdn.example.com/clip.mp4",
        duration=42,
    )


def test_list_by_owner_newest_first(session) -> None:
    _clip(session, "v1")
    older = video_store.get_by_submission_id(session, "v1")
    older.created_at = as_utc(older.created_at) - timedelta(minutes=5)
    session.commit()
    _clip(session, "v2")
    _clip(session, "v3", user_email="other@example.com")

    assert [entity.id for entity in video_store.list_by_owner(session, OWNER)] == ["vid_v2", "vid_v1"]
    assert audio_store.list_by_owner(session, OWNER) == []


def test_delete_entity_is_owner_scoped(session) -> None:
    _clip(session, "v1")

    assert video_store.delete(session, "vid_v1", "other@example.com") is False
    assert video_store.delete(session, "vid_v1", OWNER) is True
    assert video_store.get_by_submission_id(session, "v1") is None
    assert get_submission(session, "v1") is not None


def test_entity_payload_exposes_columns(session) -> None:
    _clip(session, "v1")
    payload = entity_payload(video_store.get_by_submission_id(session, "v1"))

    assert payload["duration"] == 42
    assert payload["submission_id"] == "v1"
    assert payload["mime_type"] is None
    assert store_for_file_type("spreadsheet") is None
