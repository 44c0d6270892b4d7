from .base import PageCanvas
from .reportlab_canvas import ReportlabCanvas

__all__ = ["PageCanvas", "ReportlabCanvas"]
