"""Brand fills used for the ring and divider of merged vault icons."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Mapping, Sequence, Union

from PIL import Image

LOGGER = logging.getLogger("chainmeta.imaging.brand")

RGB = tuple[int, int, int]
WHITE: RGB = (255, 255, 255)

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def parse_hex_color(value: str) -> RGB:
    """Parse ``#RRGGBB`` (leading ``#`` optional) into an RGB triple.

    Raises:
        ValueError: ``value`` is not a six-digit hex colour.
    """

    match = _HEX_COLOR.match(value.strip())
    if not match:
        raise ValueError(f"Invalid hex colour: {value!r}")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


@dataclass(frozen=True)
class SolidColor:
    rgb: RGB

    @classmethod
    def from_hex(cls, value: str) -> "SolidColor":
        return cls(parse_hex_color(value))

    def render(self, size: int) -> Image.Image:
        return Image.new("RGB", (size, size), self.rgb)


@dataclass(frozen=True)
class GradientStop:
    offset: float
    rgb: RGB


@dataclass(frozen=True)
class LinearGradient:
    """CSS-style linear gradient: ``angle`` in degrees, 0 points up, 90 left-to-right."""

    angle: float
    stops: tuple[GradientStop, ...]

    def __post_init__(self) -> None:
        if len(self.stops) < 2:
            raise ValueError("A linear gradient needs at least two stops")

    def endpoints(self) -> tuple[tuple[float, float], tuple[float, float]]:
        """Return the start and end points as percentages of the canvas."""

        radians = math.radians(self.angle - 90)
        start = (50 + 50 * math.cos(radians + math.pi), 50 + 50 * math.sin(radians + math.pi))
        end = (50 + 50 * math.cos(radians), 50 + 50 * math.sin(radians))
        return start, end

    def color_at(self, position: float) -> RGB:
        stops = sorted(self.stops, key=lambda stop: stop.offset)
        if position <= stops[0].offset:
            return stops[0].rgb
        for left, right in zip(stops, stops[1:]):
            if position <= right.offset:
                span = right.offset - left.offset
                ratio = 0.0 if span <= 0 else (position - left.offset) / span
                return tuple(round(a + (b - a) * ratio) for a, b in zip(left.rgb, right.rgb))  # type: ignore[return-value]
        return stops[-1].rgb

    def render(self, size: int) -> Image.Image:
        """Rasterise the gradient between its endpoints on a ``size`` square."""

        # The endpoints sit on the inscribed circle, so the axis is always ``size`` long.
        # Draw a top-to-bottom ramp on a canvas large enough to rotate freely, then crop.
        diagonal = math.ceil(size * math.sqrt(2))
        offset = (diagonal - size) // 2
        field = Image.new("L", (diagonal, diagonal), 0)
        field.paste(255, (0, offset + size, diagonal, diagonal))
        field.paste(Image.linear_gradient("L").resize((diagonal, size)), (0, offset))
        field = field.rotate(180 - self.angle, resample=Image.Resampling.BILINEAR)
        field = field.crop((offset, offset, offset + size, offset + size))

        ramp = [self.color_at(step / 255) for step in range(256)]
        bands = [field.point([color[channel] for color in ramp]) for channel in range(3)]
        return Image.merge("RGB", bands)


BrandFill = Union[SolidColor, LinearGradient]

PROTOCOL_BRAND_COLORS: Mapping[str, BrandFill] = {
    "Kodiak": SolidColor.from_hex("#A1623D"),
}


def lookup_brand_color(name: str, registry: Mapping[str, BrandFill] = PROTOCOL_BRAND_COLORS) -> BrandFill | None:
    """Case-insensitive registry lookup."""

    normalized = name.strip()
    if normalized in registry:
        return registry[normalized]
    lowered = normalized.lower()
    for key, fill in registry.items():
        if key.lower() == lowered:
            return fill
    return None


def resolve_brand_color(
    override: str | BrandFill | None,
    owner: str | None,
    registry: Mapping[str, BrandFill] = PROTOCOL_BRAND_COLORS,
) -> BrandFill | None:
    """Pick the fill: explicit override, then the owner's registered colour, then none."""

    if override:
        return SolidColor.from_hex(override) if isinstance(override, str) else override
    if owner:
        fill = lookup_brand_color(owner, registry)
        if fill is not None:
            LOGGER.info("Using %s brand color", owner)
        return fill
    return None


def gradient_from_stops(angle: float, stops: Sequence[tuple[float, str]]) -> LinearGradient:
    """Build a gradient from ``(offset, "#RRGGBB")`` pairs; offsets are 0..1."""

    return LinearGradient(angle, tuple(GradientStop(float(offset), parse_hex_color(color)) for offset, color in stops))


__all__ = [
    "BrandFill",
    "GradientStop",
    "LinearGradient",
    "PROTOCOL_BRAND_COLORS",
    "SolidColor",
    "WHITE",
    "gradient_from_stops",
    "lookup_brand_color",
    "parse_hex_color",
    "resolve_brand_color",
]
