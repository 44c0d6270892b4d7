from __future__ import annotations

from PIL import Image, ImageOps

from .contracts import ToneStageParams

CHANNEL_MAX = 255


def linear_value(value: float, *, gain: float, offset: float) -> int:
    """
    clamp(gain * value + offset) into [0, 255], rounded half up.
    """

    v = gain * value + offset
    v = min(float(CHANNEL_MAX), max(0.0, v))
    return int(v + 0.5)


def linear_lut(*, gain: float, offset: float) -> list[int]:
    return [linear_value(i, gain=gain, offset=offset) for i in range(CHANNEL_MAX + 1)]


def apply_tone(img: Image.Image, params: ToneStageParams) -> Image.Image:
    """
    Apply one stage to an 8-bit image: optional luma conversion, negate, linear remap.
    """

    if params.grayscale:
        img = ImageOps.grayscale(img)
    elif img.mode not in ("L", "RGB"):
        img = img.convert("RGB")

    img = ImageOps.invert(img)
    lut = linear_lut(gain=params.gain, offset=params.offset)
    return img.point(lut * len(img.getbands()))
