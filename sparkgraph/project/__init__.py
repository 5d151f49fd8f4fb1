from .barcode import polar_point, project_barcode, project_radial_barcode
from .bars import project_bars, project_equalizer, project_graded
from .lines import project_area, project_coordinates, project_dots, project_line, smooth_coordinates

__all__ = [
    "polar_point",
    "project_area",
    "project_barcode",
    "project_bars",
    "project_coordinates",
    "project_dots",
    "project_equalizer",
    "project_graded",
    "project_line",
    "project_radial_barcode",
    "smooth_coordinates",
]
