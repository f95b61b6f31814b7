"""Tests for the ImageMagick converter adapter."""

import subprocess
from pathlib import Path

import pytest

from custom_frames.adapters.imagemagick_converter import ImageMagickConverter
from custom_frames.domain.errors import ConversionError


def test_convert_invokes_dds_coder(monkeypatch, tmp_path: Path) -> None:
    source = tmp_path / "frame.png"
    target = tmp_path / "frame.dds.part"
    seen: list[list[str]] = []

    def fake_run(cmd, **kwargs):  # type: ignore[no-untyped-def]
        seen.append(cmd)
        target.write_bytes(b"DDS ")
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)

    ImageMagickConverter(command="magick").convert(source, target)

    assert seen == [["magick", str(source), f"DDS:{target}"]]


def test_convert_raises_on_nonzero_exit(monkeypatch, tmp_path: Path) -> None:
    def fake_run(cmd, **kwargs):  # type: ignore[no-untyped-def]
        return subprocess.CompletedProcess(
            cmd, 1, stdout=b"", stderr=b"convert: improper image header"
        )

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(ConversionError, match="improper image header"):
        ImageMagickConverter().convert(tmp_path / "a.png", tmp_path / "a.dds")


def test_convert_raises_when_output_missing(monkeypatch, tmp_path: Path) -> None:
    def fake_run(cmd, **kwargs):  # type: ignore[no-untyped-def]
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(ConversionError):
        ImageMagickConverter().convert(tmp_path / "a.png", tmp_path / "a.dds")


def test_convert_raises_on_timeout(monkeypatch, tmp_path: Path) -> None:
    def fake_run(cmd, **kwargs):  # type: ignore[no-untyped-def]
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", fake_run)

    with pytest.raises(ConversionError, match="timed out"):
        ImageMagickConverter(timeout_seconds=0.5).convert(
            tmp_path / "a.png", tmp_path / "a.dds"
        )


def test_convert_raises_when_binary_missing(tmp_path: Path) -> None:
    converter = ImageMagickConverter(command=str(tmp_path / "no-such-convert"))

    with pytest.raises(ConversionError, match="not found"):
        converter.convert(tmp_path / "a.png", tmp_path / "a.dds")
