"""Filesystem-backed frame repository.

Each frame is three sibling files sharing the frame id as basename:
``<id>.png`` (source), ``<id>.dds`` (texture) and ``<id>.json`` (metadata).
Every file is written to a ``.part`` temp file first and renamed into
place, and the metadata file is always written last, so a visible
``.json`` implies both binaries are complete.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from custom_frames.domain.frames import (
    FRAME_ID_PATTERN,
    METADATA_SUFFIX,
    SOURCE_SUFFIX,
    TEXTURE_SUFFIX,
    FrameRecord,
)
from custom_frames.services.frames import FrameRepository

logger = logging.getLogger(__name__)

PART_SUFFIX = ".part"
PUBLIC_SUFFIXES = (SOURCE_SUFFIX, TEXTURE_SUFFIX, METADATA_SUFFIX)


class FrameMetadata(BaseModel):
    """On-disk metadata document; field names match existing stored data."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    steam_id: str = Field(alias="steamId")
    personaname: str
    profileurl: str
    created_at: datetime | None = Field(default=None, alias="createdAt")


@dataclass
class FilesystemFrameRepository(FrameRepository):
    """Directory implementation for frame persistence."""

    root: Path

    @classmethod
    def create(cls, root: Path) -> "FilesystemFrameRepository":
        """Create a repository, making sure the directory exists."""
        root.mkdir(parents=True, exist_ok=True)
        return cls(root=root)

    def list_records(self) -> list[FrameRecord]:
        """Scan the directory for metadata files with complete assets."""
        records: list[FrameRecord] = []
        for metadata_path in self.root.glob(f"*{METADATA_SUFFIX}"):
            frame_id = metadata_path.stem
            if not FRAME_ID_PATTERN.fullmatch(frame_id):
                continue
            record = self._read_record(frame_id)
            if record is None:
                continue
            if not self._binaries_exist(frame_id):
                logger.warning(
                    "Skipping frame with missing assets", extra={"frame_id": frame_id}
                )
                continue
            records.append(record)
        return records

    def get_record(self, frame_id: str) -> FrameRecord | None:
        """Read one record by id."""
        if not FRAME_ID_PATTERN.fullmatch(frame_id):
            return None
        return self._read_record(frame_id)

    def is_taken(self, frame_id: str) -> bool:
        """Return true when any sibling file exists for the id."""
        return any(self._path(frame_id, suffix).exists() for suffix in PUBLIC_SUFFIXES)

    def write_source(self, frame_id: str, data: bytes) -> Path:
        """Atomically write the source PNG."""
        path = self._path(frame_id, SOURCE_SUFFIX)
        self._atomic_write(path, data)
        return path

    def staging_path(self, frame_id: str) -> Path:
        """Return the temp path for the texture being converted."""
        return self._path(frame_id, TEXTURE_SUFFIX + PART_SUFFIX)

    def publish_texture(self, frame_id: str) -> None:
        """Rename the staged texture into place."""
        os.replace(self.staging_path(frame_id), self._path(frame_id, TEXTURE_SUFFIX))

    def write_metadata(self, record: FrameRecord) -> None:
        """Atomically write the metadata document."""
        metadata = FrameMetadata(
            steam_id=record.owner_id,
            personaname=record.owner_display_name,
            profileurl=record.owner_profile_url,
            created_at=record.created_at,
        )
        payload = metadata.model_dump_json(by_alias=True).encode("utf-8")
        self._atomic_write(self._path(record.id, METADATA_SUFFIX), payload)

    def delete_record(self, frame_id: str) -> None:
        """Remove metadata, then the source and texture."""
        self._path(frame_id, METADATA_SUFFIX).unlink()
        self._path(frame_id, SOURCE_SUFFIX).unlink(missing_ok=True)
        self._path(frame_id, TEXTURE_SUFFIX).unlink(missing_ok=True)

    def discard(self, frame_id: str) -> None:
        """Remove whatever a failed create left behind."""
        for path in (
            self._path(frame_id, METADATA_SUFFIX),
            self._path(frame_id, SOURCE_SUFFIX),
            self._path(frame_id, TEXTURE_SUFFIX),
            self.staging_path(frame_id),
        ):
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.exception(
                    "Failed to remove partial frame file", extra={"path": str(path)}
                )

    def asset_path(self, name: str) -> Path | None:
        """Resolve ``<id>.png|.dds|.json`` to an existing file."""
        stem, dot, suffix = name.rpartition(".")
        if not dot or f".{suffix}" not in PUBLIC_SUFFIXES:
            return None
        if not FRAME_ID_PATTERN.fullmatch(stem):
            return None
        path = self._path(stem, f".{suffix}")
        if not path.is_file():
            return None
        return path

    def _path(self, frame_id: str, suffix: str) -> Path:
        return self.root / f"{frame_id}{suffix}"

    def _binaries_exist(self, frame_id: str) -> bool:
        return (
            self._path(frame_id, SOURCE_SUFFIX).is_file()
            and self._path(frame_id, TEXTURE_SUFFIX).is_file()
        )

    def _read_record(self, frame_id: str) -> FrameRecord | None:
        path = self._path(frame_id, METADATA_SUFFIX)
        try:
            raw = path.read_bytes()
            modified = path.stat().st_mtime
        except FileNotFoundError:
            return None
        try:
            metadata = FrameMetadata.model_validate_json(raw)
        except PydanticValidationError:
            logger.warning("Skipping unreadable metadata", extra={"frame_id": frame_id})
            return None
        created_at = metadata.created_at or datetime.fromtimestamp(modified, tz=UTC)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return FrameRecord(
            id=frame_id,
            owner_id=metadata.steam_id,
            owner_display_name=metadata.personaname,
            owner_profile_url=metadata.profileurl,
            created_at=created_at,
        )

    def _atomic_write(self, path: Path, data: bytes) -> None:
        with tempfile.NamedTemporaryFile(
            dir=self.root, prefix=f"{path.name}.", suffix=PART_SUFFIX, delete=False
        ) as handle:
            temp_path = Path(handle.name)
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
