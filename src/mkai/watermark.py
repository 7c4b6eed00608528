"""Watermarking of generated images.

Burns two fixed labels into every AI-generated image before it is stored:
"MK" near the top-left and "Created with MK" at the bottom-right. Both are
semi-transparent white over a soft black drop shadow. The transform keeps the
input dimensions and always encodes PNG.
"""

import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .media import InvalidDataURI, parse_data_uri, to_data_uri

logger = logging.getLogger(__name__)

TEXT_FILL = (255, 255, 255, 153)  # white, 60% opacity
SHADOW_FILL = (0, 0, 0, 128)  # black, 50% opacity
SHADOW_BLUR = 4
MARGIN = 40
CORNER_LABEL = "MK"
CORNER_SCALE = 0.05
CORNER_TOP = 60
FOOTER_LABEL = "Created with MK"
FOOTER_SCALE = 0.03

# Tried in order before falling back to Pillow's bundled font
FONT_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "Helvetica.ttc", "LiberationSans-Regular.ttf")


@dataclass(frozen=True)
class _Label:
    text: str
    position: tuple[int, int]
    anchor: str  # Pillow text anchor, e.g. "ls" = left/baseline
    size: int


def _load_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _layout(width: int, height: int) -> list[_Label]:
    corner_size = max(1, int(width * CORNER_SCALE))
    footer_size = max(1, int(width * FOOTER_SCALE))
    return [
        _Label(CORNER_LABEL, (MARGIN, CORNER_TOP + corner_size), "ls", corner_size),
        _Label(FOOTER_LABEL, (width - MARGIN, height - MARGIN), "rs", footer_size),
    ]


def apply_watermark(raster: bytes) -> bytes:
    """Watermark encoded image bytes.

    Args:
        raster: Encoded image (any format Pillow can read)

    Returns:
        PNG bytes of the same width and height with both labels drawn, or
        ``raster`` itself, unchanged, when it cannot be decoded
    """
    try:
        with Image.open(io.BytesIO(raster)) as source:
            source.load()
            base = source.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        logger.warning("Cannot decode image for watermarking, storing it unmodified: %s", exc)
        return raster

    shadow = Image.new("RGBA", base.size, (0, 0, 0, 0))
    overlay = Image.new("RGBA", base.size, (0, 0, 0, 0))
    shadow_draw = ImageDraw.Draw(shadow)
    overlay_draw = ImageDraw.Draw(overlay)

    for label in _layout(*base.size):
        font = _load_font(label.size)
        shadow_draw.text(label.position, label.text, font=font, fill=SHADOW_FILL, anchor=label.anchor)
        overlay_draw.text(label.position, label.text, font=font, fill=TEXT_FILL, anchor=label.anchor)

    # Canvas-style blur radius maps to a Gaussian sigma of half its value
    shadow = shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR / 2))
    composed = Image.alpha_composite(Image.alpha_composite(base, shadow), overlay)

    out = io.BytesIO()
    composed.save(out, format="PNG")
    return out.getvalue()


def apply_watermark_data_uri(uri: str) -> str:
    """Watermark an image held as a data URI.

    Returns a PNG data URI, or ``uri`` unchanged when it cannot be decoded.
    """
    try:
        _, raw = parse_data_uri(uri)
    except InvalidDataURI as exc:
        logger.warning("Generated image is not a data URI, storing it unmodified: %s", exc)
        return uri

    marked = apply_watermark(raw)
    if marked is raw:
        return uri
    return to_data_uri(marked, "image/png")
