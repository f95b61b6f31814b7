"""ImageMagick-backed texture converter."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from custom_frames.domain.errors import ConversionError
from custom_frames.services.frames import TextureConverter

logger = logging.getLogger(__name__)


@dataclass
class ImageMagickConverter(TextureConverter):
    """Runs the ImageMagick CLI to write a DDS texture."""

    command: str = "convert"
    timeout_seconds: float = 30.0

    def convert(self, source: Path, target: Path) -> None:
        """Convert source PNG to DDS at target."""
        # Explicit coder prefix: target carries a temp suffix.
        cmd = [self.command, str(source), f"DDS:{target}"]
        logger.debug("ImageMagick command: %s", cmd)
        try:
            completed = subprocess.run(
                cmd, capture_output=True, check=False, timeout=self.timeout_seconds
            )
        except FileNotFoundError as exc:
            raise ConversionError(
                f"ImageMagick executable not found: {self.command}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise ConversionError(
                f"ImageMagick timed out after {self.timeout_seconds:g}s"
            ) from exc
        if completed.returncode != 0 or not target.exists():
            stderr = completed.stderr.decode("utf-8", errors="ignore").strip()
            raise ConversionError(
                f"ImageMagick failed with exit code {completed.returncode}: {stderr}"
            )
