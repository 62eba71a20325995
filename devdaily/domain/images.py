"""Image variant naming shared by the processor and the serializers."""

from dataclasses import dataclass

UPLOAD_URL_PREFIX = "/uploads"


@dataclass(frozen=True)
class ImageVariant:
    suffix: str
    width: int
    height: int | None
    quality: int
    crop: bool = False


IMAGE_VARIANTS: dict[str, ImageVariant] = {
    "thumb": ImageVariant(suffix="_thumb.webp", width=150, height=150, quality=70, crop=True),
    "med": ImageVariant(suffix="_med.webp", width=800, height=None, quality=80),
    "large": ImageVariant(suffix="_large.webp", width=1920, height=None, quality=95),
}


def variant_path(base_path: str, size: str) -> str:
    """Relative file path of a variant, e.g. ``2026/10/abc_med.webp``."""
    return base_path + IMAGE_VARIANTS[size].suffix


def variant_url(base_path: str, size: str = "med") -> str:
    return f"{UPLOAD_URL_PREFIX}/{variant_path(base_path, size)}"
