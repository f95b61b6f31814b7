"""Frame record store: create, list and owner-checked delete."""

import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from custom_frames.domain.errors import ForbiddenError, NotFoundError
from custom_frames.domain.frames import (
    FRAME_ID_ALPHABET,
    FRAME_ID_LENGTH,
    FrameRecord,
)

logger = logging.getLogger(__name__)

MAX_ID_ATTEMPTS = 5


class FrameRepository(Protocol):
    """Persistence interface for frame assets and metadata."""

    def list_records(self) -> list[FrameRecord]:
        """Return every record whose assets are all present."""

    def get_record(self, frame_id: str) -> FrameRecord | None:
        """Return the record for an id, if its metadata exists."""

    def is_taken(self, frame_id: str) -> bool:
        """Return true when any file already uses the id."""

    def write_source(self, frame_id: str, data: bytes) -> Path:
        """Publish the source PNG and return its path."""

    def staging_path(self, frame_id: str) -> Path:
        """Return a temp path the converter writes into."""

    def publish_texture(self, frame_id: str) -> None:
        """Move the staged texture to its final path."""

    def write_metadata(self, record: FrameRecord) -> None:
        """Write the metadata file, making the record visible."""

    def delete_record(self, frame_id: str) -> None:
        """Remove metadata first, then both binary assets."""

    def discard(self, frame_id: str) -> None:
        """Best-effort removal of assets left by a failed create."""

    def asset_path(self, name: str) -> Path | None:
        """Resolve a public asset file name, if it exists."""


class TextureConverter(Protocol):
    """Interface for converting a source PNG into a DDS texture."""

    def convert(self, source: Path, target: Path) -> None:
        """Write the converted texture to target or raise ConversionError."""


def generate_frame_id() -> str:
    """Return a random id from the frame id alphabet."""
    return "".join(secrets.choice(FRAME_ID_ALPHABET) for _ in range(FRAME_ID_LENGTH))


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class FrameService:
    """Service owning the frame record lifecycle."""

    repository: FrameRepository
    converter: TextureConverter
    id_factory: Callable[[], str] = field(default=generate_frame_id)
    clock: Callable[[], datetime] = field(default=_utcnow)

    def list_frames(self, owner_id: str | None = None) -> list[FrameRecord]:
        """Return current records, newest first."""
        records = self.repository.list_records()
        if owner_id is not None:
            records = [record for record in records if record.owner_id == owner_id]
        return sorted(records, key=lambda record: record.created_at, reverse=True)

    def get(self, frame_id: str) -> FrameRecord | None:
        """Return a single record, if present."""
        return self.repository.get_record(frame_id)

    def create(
        self,
        owner_id: str,
        owner_display_name: str,
        owner_profile_url: str,
        source_bytes: bytes,
    ) -> FrameRecord:
        """Persist the source, convert it and write metadata last."""
        frame_id = self._allocate_id()
        try:
            source = self.repository.write_source(frame_id, source_bytes)
            self.converter.convert(source, self.repository.staging_path(frame_id))
            self.repository.publish_texture(frame_id)
            record = FrameRecord(
                id=frame_id,
                owner_id=owner_id,
                owner_display_name=owner_display_name,
                owner_profile_url=owner_profile_url,
                created_at=self.clock(),
            )
            self.repository.write_metadata(record)
        except Exception:
            self.repository.discard(frame_id)
            raise
        logger.info(
            "Frame created", extra={"frame_id": frame_id, "owner_id": owner_id}
        )
        return record

    def delete(self, frame_id: str, requester_id: str) -> None:
        """Delete a record owned by the requester."""
        record = self.repository.get_record(frame_id)
        if record is None:
            raise NotFoundError(frame_id)
        if record.owner_id != requester_id:
            raise ForbiddenError(frame_id)
        self.repository.delete_record(frame_id)
        logger.info(
            "Frame deleted", extra={"frame_id": frame_id, "owner_id": requester_id}
        )

    def asset_path(self, name: str) -> Path | None:
        """Resolve a public asset name to a file path."""
        return self.repository.asset_path(name)

    def _allocate_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            frame_id = self.id_factory()
            if not self.repository.is_taken(frame_id):
                return frame_id
            logger.warning("Frame id collision", extra={"frame_id": frame_id})
        raise RuntimeError("Could not allocate a unique frame id")
