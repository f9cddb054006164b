"""Per-file-type entity stores backing submission previews."""

from __future__ import annotations

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import delete, inspect, select
from sqlalchemy.orm import Session

from reviewhub.core.config import get_settings
from reviewhub.media.preview import file_extension, mime_type_from_data_url
from reviewhub.storage.db import acquire_connection
from reviewhub.storage.models import AudioFile, Image, Submission, Video, WebData, utcnow
from reviewhub.submissions.lifecycle import FILE_TYPE_AUDIO, FILE_TYPE_DOCUMENT, FILE_TYPE_IMAGE, FILE_TYPE_VIDEO


EntityT = TypeVar("EntityT", Image, Video, AudioFile, WebData)


class EntityStore(Generic[EntityT]):
    """CRUD over one entity table, keyed by submission and owner."""

    def __init__(
        self,
        model: Type[EntityT],
        *,
        file_type: str,
        id_prefix: str,
        extra_fields: tuple[str, ...] = (),
        cap_preview_size: bool = False,
    ) -> None:
        self.model = model
        self.file_type = file_type
        self.id_prefix = id_prefix
        self.extra_fields = extra_fields
        self.cap_preview_size = cap_preview_size

    def entity_id(self, submission_id: str) -> str:
        return f"{self.id_prefix}_{submission_id}"

    def _preview_for_storage(self, preview: str) -> Optional[str]:
        if self.cap_preview_size and len(preview) >= get_settings().document_preview_max_chars:
            return None
        return preview

    def build_for_submission(self, submission: Submission, preview: str, **extra: Any) -> EntityT:
        fields = {name: extra[name] for name in self.extra_fields if extra.get(name) is not None}
        if self.file_type == FILE_TYPE_DOCUMENT and "file_extension" not in fields:
            fields["file_extension"] = file_extension(submission.file_name)

        now = utcnow()
        return self.model(
            id=self.entity_id(submission.id),
            submission_id=submission.id,
            user_email=submission.user_email,
            file_name=submission.file_name,
            file_size=submission.file_size,
            preview_data=self._preview_for_storage(preview),
            mime_type=extra.get("mime_type") or mime_type_from_data_url(preview),
            created_at=now,
            updated_at=now,
            **fields,
        )

    def create(
        self,
        session: Session,
        submission: Submission,
        preview: str,
        *,
        commit: bool = True,
        **extra: Any,
    ) -> EntityT:
        acquire_connection(session)
        entity = self.build_for_submission(submission, preview, **extra)
        session.add(entity)
        if commit:
            session.commit()
        else:
            session.flush()
        return entity

    def list_by_owner(self, session: Session, owner_email: str) -> list[EntityT]:
        acquire_connection(session)
        return list(
            session.scalars(
                select(self.model)
                .where(self.model.user_email == owner_email)
                .order_by(self.model.created_at.desc())
            ).all()
        )

    def get_by_submission_id(self, session: Session, submission_id: str) -> Optional[EntityT]:
        acquire_connection(session)
        return session.scalar(select(self.model).where(self.model.submission_id == submission_id))

    def delete(self, session: Session, entity_id: str, owner_email: str) -> bool:
        acquire_connection(session)
        result = session.execute(
            delete(self.model).where(self.model.id == entity_id, self.model.user_email == owner_email)
        )
        session.commit()
        return bool(result.rowcount)

    def delete_by_submission_id(self, session: Session, submission_id: str) -> int:
        """Delete within the caller's transaction; the caller commits."""

        result = session.execute(delete(self.model).where(self.model.submission_id == submission_id))
        return int(result.rowcount or 0)


image_store: EntityStore[Image] = EntityStore(
    Image,
    file_type=FILE_TYPE_IMAGE,
    id_prefix="img",
    extra_fields=("width", "height"),
)
video_store: EntityStore[Video] = EntityStore(
    Video,
    file_type=FILE_TYPE_VIDEO,
    id_prefix="vid",
    extra_fields=("duration",),
)
audio_store: EntityStore[AudioFile] = EntityStore(
    AudioFile,
    file_type=FILE_TYPE_AUDIO,
    id_prefix="aud",
    extra_fields=("duration",),
)
document_store: EntityStore[WebData] = EntityStore(
    WebData,
    file_type=FILE_TYPE_DOCUMENT,
    id_prefix="web",
    extra_fields=("file_extension",),
    cap_preview_size=True,
)

_STORES = {store.file_type: store for store in (image_store, video_store, audio_store, document_store)}


def store_for_file_type(file_type: str) -> Optional[EntityStore[Any]]:
    return _STORES.get(file_type)


def all_stores() -> tuple[EntityStore[Any], ...]:
    return tuple(_STORES.values())


def entity_payload(entity: Any) -> dict[str, Any]:
    """Column values of an entity row keyed by column name."""

    return {attr.key: getattr(entity, attr.key) for attr in inspect(entity).mapper.column_attrs}
