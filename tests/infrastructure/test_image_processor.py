"""Tests for product image variants."""

import io
from datetime import datetime, timezone
from pathlib import Path

import pytest
from PIL import Image

from devdaily.infrastructure.image_processor import ImageProcessingError, ImageProcessor


def png_bytes(width: int = 1200, height: int = 900, mode: str = "RGB") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color="navy" if mode == "RGB" else 128).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def processor(tmp_path: Path) -> ImageProcessor:
    return ImageProcessor(tmp_path)


class TestProcess:
    def test_writes_three_variants(self, processor: ImageProcessor, tmp_path: Path) -> None:
        base_path = processor.process(png_bytes(), "photo.PNG", now=datetime(2026, 3, 9, tzinfo=timezone.utc))

        assert base_path.startswith("2026/03/")
        for suffix in ("_thumb.webp", "_med.webp", "_large.webp"):
            assert (tmp_path / f"{base_path}{suffix}").exists()

    def test_temp_file_is_removed(self, processor: ImageProcessor, tmp_path: Path) -> None:
        base_path = processor.process(png_bytes(), "photo.png")
        directory = (tmp_path / base_path).parent
        assert not list(directory.glob("*_temp.*"))

    def test_variant_sizes(self, processor: ImageProcessor, tmp_path: Path) -> None:
        """Thumbnails are cropped squares; medium keeps the aspect ratio."""
        base_path = processor.process(png_bytes(1200, 900), "photo.png")

        with Image.open(tmp_path / f"{base_path}_thumb.webp") as thumb:
            assert thumb.size == (150, 150)
        with Image.open(tmp_path / f"{base_path}_med.webp") as med:
            assert med.size == (800, 600)

    def test_grayscale_upload_is_converted(self, processor: ImageProcessor, tmp_path: Path) -> None:
        base_path = processor.process(png_bytes(400, 400, mode="L"), "scan.png")
        assert (tmp_path / f"{base_path}_med.webp").exists()

    def test_accepts_file_objects(self, processor: ImageProcessor) -> None:
        assert processor.process(io.BytesIO(png_bytes()), "photo.jpg.png")

    def test_rejects_unknown_extension(self, processor: ImageProcessor) -> None:
        with pytest.raises(ImageProcessingError, match="Unsupported image type"):
            processor.process(png_bytes(), "photo.bmp")

    def test_rejects_empty_upload(self, processor: ImageProcessor) -> None:
        with pytest.raises(ImageProcessingError, match="empty"):
            processor.process(b"", "photo.png")

    def test_corrupt_upload_leaves_nothing_behind(self, processor: ImageProcessor, tmp_path: Path) -> None:
        with pytest.raises(ImageProcessingError):
            processor.process(b"definitely not an image", "photo.png")
        assert not [path for path in tmp_path.rglob("*") if path.is_file()]


class TestDelete:
    def test_delete_removes_all_variants(self, processor: ImageProcessor, tmp_path: Path) -> None:
        base_path = processor.process(png_bytes(), "photo.png")

        assert processor.delete(base_path) == 3
        assert processor.delete(base_path) == 0

    def test_variant_url(self) -> None:
        assert ImageProcessor.variant_url("2026/03/abc", "thumb") == "/uploads/2026/03/abc_thumb.webp"
