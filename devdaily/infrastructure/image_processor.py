"""Product image processing.

An upload is written to a temp file under ``<upload_root>/YYYY/MM``,
rendered into three fixed-size WebP variants and then the temp file is
removed. If any step fails, the temp file and any variants already
written are removed before the error propagates.
"""

import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

import structlog
from PIL import Image, ImageOps, UnidentifiedImageError

from devdaily.domain.images import IMAGE_VARIANTS, ImageVariant, variant_path, variant_url
from devdaily.infrastructure.config import settings

logger = structlog.get_logger()

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class ImageProcessingError(Exception):
    """Raised when an upload cannot be turned into image variants."""


class ImageProcessor:
    """Writes and deletes product image variants.

    Example usage:
        processor = ImageProcessor("uploads")
        base_path = processor.process(upload.file.read(), upload.filename)
        processor.variant_url(base_path, "thumb")  # /uploads/2026/10/..._thumb.webp
    """

    def __init__(self, upload_root: str | Path | None = None) -> None:
        self.upload_root = Path(upload_root or settings.upload_root)

    def process(self, content: bytes | BinaryIO, filename: str, now: datetime | None = None) -> str:
        """Store an uploaded image as thumb/med/large variants.

        Args:
            content: Raw bytes or a readable binary file.
            filename: Original client filename, used for the extension.
            now: Clock override for the year/month directory.

        Returns:
            Base path relative to the upload root, without suffix.

        Raises:
            ImageProcessingError: If the upload is not a usable image.
        """
        data = content if isinstance(content, bytes) else content.read()
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension not in ALLOWED_EXTENSIONS:
            raise ImageProcessingError(f"Unsupported image type: .{extension or '?'}")
        if not data:
            raise ImageProcessingError("Uploaded image is empty")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ImageProcessingError("Uploaded image exceeds 5 MB")

        now = now or datetime.now(timezone.utc)
        relative_dir = f"{now:%Y}/{now:%m}"
        directory = self.upload_root / relative_dir
        directory.mkdir(parents=True, exist_ok=True)

        stem = f"{int(time.time())}_{secrets.token_hex(8)}"
        base_path = f"{relative_dir}/{stem}"
        temp_file = directory / f"{stem}_temp.{extension}"
        temp_file.write_bytes(data)

        written: list[Path] = []
        try:
            with Image.open(temp_file) as source:
                source.load()
                image = ImageOps.exif_transpose(source)
                if image.mode not in ("RGB", "RGBA"):
                    image = image.convert("RGBA" if "transparency" in image.info else "RGB")
                for size, variant in IMAGE_VARIANTS.items():
                    target = self.upload_root / variant_path(base_path, size)
                    self._render(image, variant).save(target, format="WEBP", quality=variant.quality)
                    written.append(target)
        except (OSError, UnidentifiedImageError, ValueError) as e:
            for path in written:
                path.unlink(missing_ok=True)
            logger.warning("Image processing failed", filename=filename, error=str(e))
            raise ImageProcessingError(f"Could not process image: {e}") from e
        finally:
            temp_file.unlink(missing_ok=True)

        logger.info("Image processed", base_path=base_path, variants=list(IMAGE_VARIANTS))
        return base_path

    def _render(self, image: Image.Image, variant: ImageVariant) -> Image.Image:
        if variant.crop and variant.height:
            return ImageOps.fit(image, (variant.width, variant.height), Image.Resampling.LANCZOS)
        ratio = variant.width / image.width
        height = max(1, round(image.height * ratio))
        return image.resize((variant.width, height), Image.Resampling.LANCZOS)

    def delete(self, base_path: str) -> int:
        """Remove every variant of an image; returns how many existed."""
        removed = 0
        for size in IMAGE_VARIANTS:
            path = self.upload_root / variant_path(base_path, size)
            if path.exists():
                path.unlink()
                removed += 1
        logger.info("Image deleted", base_path=base_path, removed=removed)
        return removed

    @staticmethod
    def variant_url(base_path: str, size: str = "med") -> str:
        return variant_url(base_path, size)


def get_image_processor() -> ImageProcessor:
    return ImageProcessor(settings.upload_root)
