from __future__ import annotations

import re
from typing import Mapping

from PIL import ImageColor

from sparkgraph.errors import GraphConfigError

RGBA = tuple[int, int, int, int]

_CSS_VAR = re.compile(r"^var\(\s*(--[\w-]+)\s*(?:,\s*(.+?)\s*)?\)$")


class ColorCache:
    """Parses CSS color strings into RGBA tuples and remembers the results.

    One cache belongs to one engine; `var(--name)` references are resolved
    through the `variables` mapping given at construction.
    """

    def __init__(self, variables: Mapping[str, str] | None = None) -> None:
        self._variables: dict[str, str] = {}
        for name, value in (variables or {}).items():
            key = name if name.startswith("--") else f"--{name}"
            self._variables[key] = str(value)
        self._parsed: dict[str, RGBA] = {}

    def __len__(self) -> int:
        return len(self._parsed)

    def clear(self) -> None:
        self._parsed.clear()

    def rgba(self, color: str) -> RGBA:
        cached = self._parsed.get(color)
        if cached is not None:
            return cached
        parsed = self._parse(color, depth=0)
        self._parsed[color] = parsed
        return parsed

    def _parse(self, color: str, *, depth: int) -> RGBA:
        if depth > 8:
            raise GraphConfigError(f"color variable chain too deep: {color}")
        raw = color.strip()
        match = _CSS_VAR.match(raw)
        if match is not None:
            name, default = match.group(1), match.group(2)
            target = self._variables.get(name, default)
            if target is None:
                raise GraphConfigError(f"unresolved color variable `{name}`")
            return self._parse(target, depth=depth + 1)
        try:
            out = ImageColor.getrgb(raw)
        except ValueError as exc:
            raise GraphConfigError(f"unsupported color: {color!r}") from exc
        if len(out) == 3:
            r, g, b = out
            return (r, g, b, 255)
        r, g, b, a = out
        return (r, g, b, a)


def to_hex(rgba: RGBA) -> str:
    r, g, b, a = rgba
    if a == 255:
        return f"#{r:02x}{g:02x}{b:02x}"
    return f"#{r:02x}{g:02x}{b:02x}{a:02x}"


def blend(color_a: str, color_b: str, factor: float, cache: ColorCache) -> str:
    """Mix two colors; factor 0 yields `color_a`, 1 yields `color_b`."""
    f = max(0.0, min(1.0, float(factor)))
    if f == 0.0:
        return color_a
    if f == 1.0:
        return color_b
    a = cache.rgba(color_a)
    b = cache.rgba(color_b)
    mixed = tuple(int(round(ca + (cb - ca) * f)) for ca, cb in zip(a, b))
    return to_hex((mixed[0], mixed[1], mixed[2], mixed[3]))
