from __future__ import annotations

import pytest

from reviewhub.comments.service import (
    count_comments,
    create_comment,
    delete_comment,
    get_comment,
    list_comments,
    update_comment,
)
from reviewhub.storage.errors import FeatureUnavailableError
from reviewhub.storage.models import SubmissionComment
from reviewhub.submissions.service import create_submission, delete_submission


OWNER = "owner@example.com"
REVIEWER = "reviewer@example.com"


@pytest.fixture
def submission(session):
    return create_submission(
        session,
        submission_id="s1",
        user_email=OWNER,
        file_name="a.jpg",
        file_type="image",
        file_size=10,
    )


def _comment(session, text: str, author: str = OWNER, author_type: str = "user", parent: int | None = None):
    return create_comment(
        session,
        submission_id="s1",
        author_email=author,
        author_type=author_type,
        comment_text=text,
        parent_comment_id=parent,
    )


def test_thread_is_listed_oldest_first(session, submission) -> None:
    del submission
    root = _comment(session, "Is this ok?")
    reply = _comment(session, "Needs more light", author=REVIEWER, author_type="admin", parent=root.id)

    comments = list_comments(session, "s1")
    assert [comment.id for comment in comments] == [root.id, reply.id]
    assert comments[1].parent_comment_id == root.id
    assert count_comments(session, "s1") == 2


def test_only_author_edits_and_admin_deletes_any(session, submission) -> None:
    del submission
    comment = _comment(session, "first draft")

    assert update_comment(session, comment.id, "edited", REVIEWER) is None
    assert update_comment(session, comment.id, "edited", OWNER).comment_text == "edited"

    assert delete_comment(session, comment.id, REVIEWER) is False
    assert delete_comment(session, comment.id, REVIEWER, is_admin=True) is True
    assert get_comment(session, comment.id) is None


def test_comments_cascade_with_submission(session, submission) -> None:
    del submission
    root = _comment(session, "root")
    _comment(session, "reply", parent=root.id)

    assert delete_submission(session, "s1", OWNER) is True
    assert count_comments(session, "s1") == 0


def test_unknown_author_type(session, submission) -> None:
    del submission
    with pytest.raises(ValueError):
        _comment(session, "hi", author_type="robot")


def test_missing_table_degrades(engine, session) -> None:
    SubmissionComment.__table__.drop(engine)

    assert list_comments(session, "s1") == []
    assert count_comments(session, "s1") == 0
    with pytest.raises(FeatureUnavailableError, match="Comments feature not available"):
        _comment(session, "hello")


def test_held_comment_sees_edit(session, submission) -> None:
    del submission
    held = _comment(session, "first draft")

    update_comment(session, held.id, "second draft", OWNER)
    assert held.comment_text == "second draft"
    assert get_comment(session, held.id).comment_text == "second draft"
