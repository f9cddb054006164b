from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from reviewhub.media.stores import all_stores, document_store, image_store
from reviewhub.storage.errors import DuplicateRecordError, InvalidStatusTransitionError
from reviewhub.storage.models import Image, Submission, User, WebData, as_utc
from reviewhub.submissions.service import (
    create_submission,
    delete_submission,
    get_admin_stats,
    get_pending_submissions,
    get_rejected_submissions,
    get_submission,
    get_submission_with_details,
    get_submissions_by_type,
    get_user_submission_stats,
    get_user_submissions,
    get_validated_submissions,
    update_submission_status,
)


OWNER = "owner@example.com"
PNG = "data:image/png;base64,iVBORw0KGgo="


def _create(session, submission_id: str, file_type: str = "image", **kwargs):
    kwargs.setdefault("user_email", OWNER)
    kwargs.setdefault("file_name", f"{submission_id}.bin")
    kwargs.setdefault("file_size", 1024)
    return create_submission(session, submission_id=submission_id, file_type=file_type, **kwargs)


def _backdate(session, submission_id: str, minutes: int) -> None:
    submission = session.get(Submission, submission_id)
    stamp = as_utc(submission.created_at) - timedelta(minutes=minutes)
    submission.created_at = stamp
    submission.updated_at = stamp
    session.commit()


def test_fan_out_writes_exactly_one_matching_entity(session) -> None:
    _create(session, "sub-1", "image", preview=PNG, width=640, height=480)

    details = get_submission_with_details(session, "sub-1")
    assert details is not None
    submission, entity = details
    assert submission.status == "pending"
    assert isinstance(entity, Image)
    assert entity.id == "img_sub-1"
    assert entity.preview_data == PNG
    assert entity.mime_type == "image/png"
    assert entity.width == 640

    for store in all_stores():
        found = store.get_by_submission_id(session, "sub-1")
        if store is image_store:
            assert found is not None
        else:
            assert found is None

    assert session.scalar(select(User).where(User.email == OWNER)) is not None


def test_no_preview_means_no_entity(session) -> None:
    _create(session, "sub-2", "video")
    submission, entity = get_submission_with_details(session, "sub-2")
    assert submission.id == "sub-2"
    assert entity is None


def test_document_entity_derives_extension_and_caps_preview(session, monkeypatch) -> None:
    from reviewhub.core.config import get_settings

    monkeypatch.setattr(get_settings(), "document_preview_max_chars", 10)
    _create(session, "doc-1", "document", file_name="notes.txt", preview="data:text/plain;base64,QUJDREVGR0g=")
    _create(session, "doc-2", "document", file_name="README", preview="short")

    capped = document_store.get_by_submission_id(session, "doc-1")
    assert isinstance(capped, WebData)
    assert capped.preview_data is None
    assert capped.file_extension == "txt"
    assert capped.id == "web_doc-1"

    small = document_store.get_by_submission_id(session, "doc-2")
    assert small.preview_data == "short"
    assert small.file_extension is None


def test_duplicate_submission_id_is_refused(session) -> None:
    _create(session, "sub-dup", "audio", preview="data:audio/mpeg;base64,AAAA")
    with pytest.raises(DuplicateRecordError):
        _create(session, "sub-dup", "audio", preview="data:audio/mpeg;base64,AAAA")
    assert len(get_user_submissions(session, OWNER)) == 1


def test_delete_removes_submission_and_entity(session) -> None:
    _create(session, "sub-del", "image", preview=PNG)

    assert delete_submission(session, "sub-del", OWNER) is True
    assert get_submission(session, "sub-del") is None
    assert image_store.get_by_submission_id(session, "sub-del") is None


def test_wrong_owner_delete_leaves_rows(session) -> None:
    _create(session, "sub-keep", "image", preview=PNG)

    assert delete_submission(session, "sub-keep", "intruder@example.com") is False
    assert delete_submission(session, "missing", OWNER) is False
    assert get_submission(session, "sub-keep") is not None
    assert image_store.get_by_submission_id(session, "sub-keep") is not None


def test_status_update_is_idempotent_and_advances_updated_at(session) -> None:
    created_at = as_utc(_create(session, "sub-status").created_at)

    first = update_submission_status(session, "sub-status", "validated")
    assert first.status == "validated"
    first_updated_at = as_utc(first.updated_at)
    assert first_updated_at > created_at

    second = update_submission_status(session, "sub-status", "validated")
    assert second.status == "validated"
    assert as_utc(second.updated_at) > first_updated_at


def test_pending_to_validated_scenario(session) -> None:
    created = _create(session, "sub-flow", "audio", preview="data:audio/wav;base64,AAAA")
    assert created.status == "pending"

    updated = update_submission_status(session, "sub-flow", "validated")
    assert updated.status == "validated"
    assert as_utc(updated.updated_at) > as_utc(updated.created_at)
    assert get_validated_submissions(session)[0].id == "sub-flow"
    assert get_pending_submissions(session) == []


def test_rejection_stores_reason_and_other_statuses_clear_it(session) -> None:
    _create(session, "sub-rej")
    rejected = update_submission_status(
        session,
        "sub-rej",
        "rejected",
        rejection_reason="Blurry",
        rejection_feedback="Please retake in daylight",
    )
    assert rejected.rejection_reason == "Blurry"
    assert rejected.rejection_feedback == "Please retake in daylight"

    reopened = update_submission_status(session, "sub-rej", "pending")
    assert reopened.rejection_reason is None
    assert reopened.rejection_feedback is None


def test_conflicting_decision_is_refused(session) -> None:
    _create(session, "sub-race")
    update_submission_status(session, "sub-race", "validated")

    with pytest.raises(InvalidStatusTransitionError) as excinfo:
        update_submission_status(session, "sub-race", "rejected", rejection_reason="late")

    assert excinfo.value.current_status == "validated"
    assert get_submission(session, "sub-race").status == "validated"


def test_status_update_unknown_id_and_status(session) -> None:
    assert update_submission_status(session, "nope", "validated") is None
    with pytest.raises(ValueError):
        update_submission_status(session, "nope", "archived")


def test_status_listings_filter_and_order(session) -> None:
    for index, status in enumerate(["pending", "processing", "submitted", "validated", "successful", "rejected", "failed"]):
        _create(session, f"s-{status}", status=status)
        _backdate(session, f"s-{status}", minutes=100 - index)

    pending = get_pending_submissions(session)
    assert [row.id for row in pending] == ["s-pending", "s-processing", "s-submitted"]

    validated = get_validated_submissions(session)
    assert [row.id for row in validated] == ["s-successful", "s-validated"]

    rejected = get_rejected_submissions(session)
    assert [row.id for row in rejected] == ["s-failed", "s-rejected"]


def test_owner_listings_and_stats(session) -> None:
    _create(session, "a", "image")
    _backdate(session, "a", minutes=10)
    _create(session, "b", "video")
    _create(session, "c", "image", user_email="other@example.com")

    rows = get_user_submissions(session, OWNER)
    assert [row.id for row in rows] == ["b", "a"]
    assert not hasattr(rows[0], "preview")

    assert [row.id for row in get_submissions_by_type(session, OWNER, "image")] == ["a"]
    assert get_user_submission_stats(session, OWNER) == {
        "total": 2,
        "images": 1,
        "videos": 1,
        "audios": 0,
        "documents": 0,
    }


def test_admin_stats_counts(session) -> None:
    _create(session, "p1")
    _create(session, "p2", status="submitted")
    _create(session, "v1", "video", status="validated")
    _create(session, "r1", "audio", status="rejected", user_email="second@example.com")

    stats = get_admin_stats(session)

    assert stats["total_submissions"] == 4
    assert stats["pending_submissions"] == 2
    assert stats["validated_submissions"] == 1
    assert stats["rejected_submissions"] == 1
    assert stats["total_volunteers"] == 2
    assert stats["today_submissions"] == 4
    assert len(stats["recent_submissions"]) == 4
    assert {row["type"]: row["count"] for row in stats["file_type_stats"]} == {"audio": 1, "image": 2, "video": 1}
    assert sum(day["count"] for day in stats["weekly_trend"]) == 4


def _count(session, model) -> int:
    return int(session.scalar(select(func.count()).select_from(model)))


def test_entity_failure_rolls_back_the_whole_submission(session, monkeypatch) -> None:
    def broken_row(submission, preview, **extra):
        return Image(id=image_store.entity_id(submission.id), submission_id=submission.id, user_email=OWNER)

    monkeypatch.setattr(image_store, "build_for_submission", broken_row)

    with pytest.raises(IntegrityError):
        _create(session, "sub-atomic", "image", preview=PNG)

    assert get_submission(session, "sub-atomic") is None
    assert _count(session, Submission) == 0
    assert _count(session, Image) == 0
    assert _count(session, User) == 0


def test_entity_delete_failure_does_not_block_submission_delete(session, monkeypatch) -> None:
    _create(session, "sub-best-effort", "image", preview=PNG)

    def locked(_session, _submission_id):
        raise OperationalError("DELETE FROM images", {}, Exception("database is locked"))

    monkeypatch.setattr(image_store, "delete_by_submission_id", locked)

    assert delete_submission(session, "sub-best-effort", OWNER) is True
    assert get_submission(session, "sub-best-effort") is None


def test_held_submission_sees_status_update(session) -> None:
    held = _create(session, "sub-held")

    update_submission_status(session, "sub-held", "rejected", rejection_reason="Blurry")
    assert held.status == "rejected"
    assert held.rejection_reason == "Blurry"
