"""Pure treemap visualization package.

This package configures the treemap view, adapts report requests and shapes
report tables into treemap nodes. It must not import Django or perform any I/O.
"""

from .adapter import TreemapVisualization, is_there_data_to_display, metric_to_graph
from .config import TreemapConfig, configure_visualization

__all__ = [
    "TreemapConfig",
    "TreemapVisualization",
    "configure_visualization",
    "is_there_data_to_display",
    "metric_to_graph",
]
