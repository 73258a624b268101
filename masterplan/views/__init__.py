from masterplan.views.detail import DetailPanel, UnitPage
from masterplan.views.explorer import ExplorerPage, ExplorerView, LeafClickPolicy, SiblingItem
from masterplan.views.navigator import Navigator
from masterplan.views.viewpoints import ViewpointTour

__all__ = [
    "DetailPanel",
    "ExplorerPage",
    "ExplorerView",
    "LeafClickPolicy",
    "Navigator",
    "SiblingItem",
    "UnitPage",
    "ViewpointTour",
]
