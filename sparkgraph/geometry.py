from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Literal

from sparkgraph.errors import GraphConfigError


class ChartType(str, Enum):
    LINE = "line"
    AREA = "area"
    DOTS = "dots"
    BAR = "bar"
    EQUALIZER = "equalizer"
    GRADED = "graded"
    BARCODE = "barcode"
    RADIAL_BARCODE = "radial_barcode"


class Orientation(str, Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class RadialVariant(str, Enum):
    BARCODE = "barcode"
    SUNBURST = "sunburst"


def parse_enum(enum_cls: type[Enum], raw: Any, field_name: str) -> Any:
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        choices = ", ".join(str(m.value) for m in enum_cls)
        raise GraphConfigError(f"invalid {field_name} `{raw}` (expected one of: {choices})") from None


@dataclass(frozen=True)
class ProjectedCoordinate:
    x: float
    y: float
    value: float
    y_baseline: float | None = None


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    value: float
    color: str | None = None


@dataclass(frozen=True)
class Dot:
    x: float
    y: float
    value: float
    radius: float
    color: str | None = None


@dataclass(frozen=True)
class LineGeometry:
    points: tuple[ProjectedCoordinate, ...]
    controls: tuple[ProjectedCoordinate, ...] = ()
    smoothed: bool = False
    kind: Literal["line"] = "line"


@dataclass(frozen=True)
class AreaGeometry:
    points: tuple[ProjectedCoordinate, ...]
    baseline: float
    polygon: tuple[tuple[float, float], ...]
    controls: tuple[ProjectedCoordinate, ...] = ()
    smoothed: bool = False
    kind: Literal["area"] = "area"


@dataclass(frozen=True)
class DotsGeometry:
    dots: tuple[Dot, ...]
    kind: Literal["dots"] = "dots"


@dataclass(frozen=True)
class BarGeometry:
    bars: tuple[Rect, ...]
    orientation: str = Orientation.VERTICAL.value
    baseline: float = 0.0
    kind: Literal["bar"] = "bar"


@dataclass(frozen=True)
class EqualizerColumn:
    index: int
    value: float
    levels: tuple[Rect, ...]


@dataclass(frozen=True)
class EqualizerGeometry:
    columns: tuple[EqualizerColumn, ...]
    bucket_size: float
    level_count: int
    kind: Literal["equalizer"] = "equalizer"


@dataclass(frozen=True)
class GradedCell:
    x: float
    y: float
    width: float
    height: float
    rank: int
    filled: bool
    color: str | None = None


@dataclass(frozen=True)
class GradedColumn:
    index: int
    value: float
    rank: int | None
    cells: tuple[GradedCell, ...]


@dataclass(frozen=True)
class GradedGeometry:
    columns: tuple[GradedColumn, ...]
    rank_count: int
    kind: Literal["graded"] = "graded"


@dataclass(frozen=True)
class BarcodeGeometry:
    cells: tuple[Rect, ...]
    kind: Literal["barcode"] = "barcode"


@dataclass(frozen=True)
class Wedge:
    index: int
    value: float
    start_angle: float
    end_angle: float
    inner_radius: float
    outer_radius: float
    corners: tuple[tuple[float, float], ...]
    color: str | None = None


@dataclass(frozen=True)
class RadialBarcodeGeometry:
    wedges: tuple[Wedge, ...]
    variant: str
    cx: float
    cy: float
    radius: float
    inner_radius: float
    kind: Literal["radial_barcode"] = "radial_barcode"


ChartGeometry = (
    LineGeometry
    | AreaGeometry
    | DotsGeometry
    | BarGeometry
    | EqualizerGeometry
    | GradedGeometry
    | BarcodeGeometry
    | RadialBarcodeGeometry
)


def geometry_to_dict(geometry: ChartGeometry) -> dict[str, Any]:
    return asdict(geometry)
