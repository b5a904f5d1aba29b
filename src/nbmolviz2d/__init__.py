"""nbmolviz2d - interactive 2D molecule graphs kept in sync with a notebook kernel."""

from nbmolviz2d._config import VizConfig, load_config
from nbmolviz2d.comm import Comm, LoopbackComm
from nbmolviz2d.events import (
    BaseEvent,
    CallEndEvent,
    CallErrorEvent,
    CallStartEvent,
    CallStatus,
    Event,
    EventDispatcher,
    EventProcessor,
    LayoutEndEvent,
    MessageIgnoredEvent,
    RenderEvent,
    TypedEventProcessor,
)
from nbmolviz2d.exceptions import (
    MissingElementError,
    RemoteCallError,
    SimulationConfigError,
    UnknownFunctionError,
    VisualLookupError,
)
from nbmolviz2d.layout import ForceSimulation
from nbmolviz2d.models import LinksModel, MoleculeModel, NodesModel, WidgetModel
from nbmolviz2d.molecule import graph_from_networkx, graph_to_networkx, load_graph, normalize_graph
from nbmolviz2d.reconcile import same_ids, update_in_place, update_records
from nbmolviz2d.rpc import FunctionDispatcher, PendingCall, RemoteCaller
from nbmolviz2d.scene import SceneElement
from nbmolviz2d.views import LinksView, MolViz2DView, NodesView
from nbmolviz2d.widget import MoleculeWidget

__all__ = [
    # Widget and view
    "MoleculeWidget",
    "MolViz2DView",
    "NodesView",
    "LinksView",
    "SceneElement",
    "ForceSimulation",
    # Models and channel
    "WidgetModel",
    "MoleculeModel",
    "NodesModel",
    "LinksModel",
    "Comm",
    "LoopbackComm",
    # Calls
    "FunctionDispatcher",
    "RemoteCaller",
    "PendingCall",
    # Reconciliation
    "same_ids",
    "update_in_place",
    "update_records",
    # Molecules
    "graph_from_networkx",
    "graph_to_networkx",
    "normalize_graph",
    "load_graph",
    # Config
    "VizConfig",
    "load_config",
    # Errors
    "VisualLookupError",
    "MissingElementError",
    "UnknownFunctionError",
    "RemoteCallError",
    "SimulationConfigError",
    # Events
    "BaseEvent",
    "Event",
    "EventDispatcher",
    "EventProcessor",
    "TypedEventProcessor",
    "RenderEvent",
    "CallStartEvent",
    "CallEndEvent",
    "CallErrorEvent",
    "CallStatus",
    "MessageIgnoredEvent",
    "LayoutEndEvent",
]
