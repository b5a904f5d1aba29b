"""Scene views: the molecule render controller and its atom/bond sub-views."""

from nbmolviz2d.views.links import LinksView
from nbmolviz2d.views.molecule import OPERATIONS, MolViz2DView
from nbmolviz2d.views.nodes import NodesView

__all__ = ["LinksView", "MolViz2DView", "NodesView", "OPERATIONS"]
