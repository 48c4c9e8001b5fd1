#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/codecs/raster.py
"""Pillow helpers for decoding, re-encoding and editing raster images."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Sequence

from convertflow.constants import (
    DEFAULT_IMAGE_QUALITY,
    DEPS_HEIF,
    DEPS_IMAGE,
    HEIF_IMAGE_FORMATS,
    LOSSY_IMAGE_FORMATS,
    OPAQUE_IMAGE_FORMATS,
    PILLOW_FORMATS,
    PLACEHOLDER_BACKGROUND,
    PLACEHOLDER_BORDER,
    PLACEHOLDER_FOREGROUND,
    PLACEHOLDER_IMAGE_SIZE,
)
from convertflow.exceptions import CollaboratorError
from convertflow.utils.decorators import requires_dependencies

if TYPE_CHECKING:
    from PIL import Image

logger = logging.getLogger(__name__)

CODEC = "pillow"

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

_ICO_MAX_SIDE = 256


@requires_dependencies("heif", DEPS_HEIF)
def register_heif_opener() -> None:
    """Let Pillow open HEIC and HEIF containers."""
    import pillow_heif

    pillow_heif.register_heif_opener()


@requires_dependencies("image", DEPS_IMAGE)
def load_image(data: bytes, source_format: str = "") -> "Image.Image":
    """Decode raster (or SVG) bytes into a fully loaded Pillow image.

    SVG input is rasterized with PyMuPDF first. HEIC/HEIF input registers the
    pillow-heif opener. Multi-frame formats yield their first frame.

    Raises
    ------
    CollaboratorError
        If the bytes cannot be decoded

    """
    from PIL import Image, UnidentifiedImageError

    if source_format == "svg":
        from convertflow.codecs.pdf import rasterize_svg

        data = rasterize_svg(data)
    elif source_format in HEIF_IMAGE_FORMATS:
        register_heif_opener()

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise CollaboratorError(f"Failed to load image: {e}", codec=CODEC, stage="load", original_error=e) from e
    return image


def has_alpha(image: "Image.Image") -> bool:
    """Check whether an image carries transparency."""
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def normalize_mode(image: "Image.Image") -> "Image.Image":
    """Convert to RGBA when the image has transparency, otherwise RGB."""
    target_mode = "RGBA" if has_alpha(image) else "RGB"
    return image if image.mode == target_mode else image.convert(target_mode)


def flatten(image: "Image.Image", background: tuple[int, int, int] = (255, 255, 255)) -> "Image.Image":
    """Composite an image onto an opaque background."""
    from PIL import Image

    image = normalize_mode(image)
    if image.mode != "RGBA":
        return image
    surface = Image.new("RGB", image.size, background)
    surface.paste(image, mask=image.getchannel("A"))
    return surface


@requires_dependencies("image", DEPS_IMAGE)
def encode_image(image: "Image.Image", fmt: str, quality: int = DEFAULT_IMAGE_QUALITY) -> bytes:
    """Encode an image in the codec for format code ``fmt``.

    Formats without an alpha channel (jpg, jpeg, bmp) get an opaque white
    background; lossy codecs use ``quality``.

    Raises
    ------
    CollaboratorError
        If Pillow has no encoder for the format or encoding fails

    """
    fmt = fmt.lower()
    codec = PILLOW_FORMATS.get(fmt)
    if codec is None:
        raise CollaboratorError(f"No raster encoder for '{fmt}'", codec=CODEC, stage="encode")

    surface = flatten(image) if fmt in OPAQUE_IMAGE_FORMATS else normalize_mode(image)
    params: dict = {}
    if fmt in LOSSY_IMAGE_FORMATS:
        params["quality"] = quality
    if fmt == "ico":
        params["sizes"] = [(min(surface.width, _ICO_MAX_SIDE), min(surface.height, _ICO_MAX_SIDE))]

    buffer = io.BytesIO()
    try:
        surface.save(buffer, format=codec, **params)
    except (OSError, KeyError, ValueError) as e:
        raise CollaboratorError(
            f"Failed to encode {fmt.upper()}: {e}", codec=CODEC, stage="encode", original_error=e
        ) from e
    return buffer.getvalue()


def source_codec_format(image: "Image.Image", fallback: str = "png") -> str:
    """Return the format code matching the codec an image was decoded from."""
    decoded = (image.format or "").upper()
    for code, codec in PILLOW_FORMATS.items():
        if codec == decoded:
            return code
    return fallback


@requires_dependencies("image", DEPS_IMAGE)
def to_grayscale(image: "Image.Image") -> "Image.Image":
    """Replace each pixel's colour channels with its luminance.

    Luminance is ``0.299 R + 0.587 G + 0.114 B`` rounded half up and written to
    all three channels; an alpha channel is kept unchanged.

    Examples
    --------
    >>> from PIL import Image
    >>> to_grayscale(Image.new("RGB", (1, 1), (255, 0, 0))).getpixel((0, 0))
    (76, 76, 76)

    """
    from PIL import Image

    image = normalize_mode(image)
    red_w, green_w, blue_w = LUMA_WEIGHTS
    red_t = [v * red_w for v in range(256)]
    green_t = [v * green_w for v in range(256)]
    blue_t = [v * blue_w for v in range(256)]

    gray = Image.new("L", image.size)
    gray.putdata(
        [min(255, int(red_t[px[0]] + green_t[px[1]] + blue_t[px[2]] + 0.5)) for px in image.getdata()]
    )

    bands = [gray, gray, gray]
    if image.mode == "RGBA":
        bands.append(image.getchannel("A"))
    return Image.merge(image.mode, bands)


@requires_dependencies("image", DEPS_IMAGE)
def rotate_image(image: "Image.Image", angle: int) -> "Image.Image":
    """Rotate clockwise by a multiple of 90 degrees without resampling."""
    from PIL import Image

    angle %= 360
    if angle % 90:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {angle}")
    transposes = {
        90: Image.Transpose.ROTATE_270,
        180: Image.Transpose.ROTATE_180,
        270: Image.Transpose.ROTATE_90,
    }
    if angle == 0:
        return image.copy()
    return image.transpose(transposes[angle])


@requires_dependencies("image", DEPS_IMAGE)
def placeholder_image(lines: Sequence[str], size: tuple[int, int] = PLACEHOLDER_IMAGE_SIZE) -> "Image.Image":
    """Draw text lines on a bordered white canvas."""
    from PIL import Image, ImageDraw, ImageFont

    image = Image.new("RGB", size, PLACEHOLDER_BACKGROUND)
    draw = ImageDraw.Draw(image)
    draw.rectangle([10, 10, size[0] - 11, size[1] - 11], outline=PLACEHOLDER_BORDER, width=2)
    font = ImageFont.load_default()
    y = 40
    for line in lines:
        draw.text((40, y), line, fill=PLACEHOLDER_FOREGROUND, font=font)
        y += 24
    return image
