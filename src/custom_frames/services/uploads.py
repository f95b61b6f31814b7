"""Upload pipeline: validate, resolve the owner, publish the frame."""

import asyncio
import io
import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from functools import cache
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from custom_frames.domain.errors import ValidationError
from custom_frames.domain.frames import FRAME_HEIGHT, FRAME_WIDTH, FrameRecord
from custom_frames.services.frames import FrameService
from custom_frames.services.identity import IdentityService

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"


@dataclass
class UploadService:
    """Runs one upload attempt from received bytes to a published frame."""

    frame_service: FrameService
    identity_service: IdentityService
    banned_ids: Collection[str] = field(default_factory=frozenset)
    template_path: Path | None = None

    def is_banned(self, steam_id: str) -> bool:
        """Return true when the Steam id is on the deny-list."""
        return steam_id in self.banned_ids

    async def upload(
        self,
        steam_id: str,
        filename: str | None,
        content_type: str | None,
        data: bytes,
    ) -> FrameRecord:
        """Validate the file and publish it as a new frame."""
        logger.info("Upload received", extra={"steam_id": steam_id})
        try:
            validate_frame_image(filename, content_type, data)
        except ValidationError as exc:
            logger.info(
                "Upload rejected", extra={"steam_id": steam_id, "reason": str(exc)}
            )
            raise
        profile = await self.identity_service.resolve(steam_id)
        logger.info("Upload converting", extra={"steam_id": steam_id})
        record = await asyncio.to_thread(
            self.frame_service.create,
            owner_id=steam_id,
            owner_display_name=profile.persona_name,
            owner_profile_url=profile.profile_url,
            source_bytes=data,
        )
        logger.info(
            "Upload published", extra={"steam_id": steam_id, "frame_id": record.id}
        )
        return record

    def template_png(self) -> bytes:
        """Return the downloadable frame template."""
        if self.template_path is not None and self.template_path.is_file():
            return self.template_path.read_bytes()
        return blank_template_png()


def validate_frame_image(
    filename: str | None, content_type: str | None, data: bytes
) -> None:
    """Check the declared type, then the actual format and size."""
    if not filename or not data:
        raise ValidationError("not a png")
    if (content_type or "").split(";")[0].strip().lower() != PNG_CONTENT_TYPE:
        raise ValidationError("not a png")
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            size = image.size
    except Image.DecompressionBombError as exc:
        raise ValidationError("wrong dimensions") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError("wrong format") from exc
    if image_format != "PNG":
        raise ValidationError("wrong format")
    if size != (FRAME_WIDTH, FRAME_HEIGHT):
        raise ValidationError("wrong dimensions")


@cache
def blank_template_png() -> bytes:
    """Render a transparent PNG with the required frame size."""
    buffer = io.BytesIO()
    Image.new("RGBA", (FRAME_WIDTH, FRAME_HEIGHT), (0, 0, 0, 0)).save(
        buffer, format="PNG"
    )
    return buffer.getvalue()
