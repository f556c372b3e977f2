from .algorithms import ALGORITHM_CHOICES, Algorithm, AlgoResult, AlgoStep, ValidationError, run_algorithm
from .config import LabSettings
from .editor import Editor, EditorLockedError, EditorMode, PendingEditDialog, StaticEditDialog
from .graph import Edge, GraphStore, Node
from .player import PlaybackSummary, PlayerState, StepPlayer
from .session import LabSession, Notification

__all__ = [
    "ALGORITHM_CHOICES",
    "Algorithm",
    "AlgoResult",
    "AlgoStep",
    "Edge",
    "Editor",
    "EditorLockedError",
    "EditorMode",
    "GraphStore",
    "LabSession",
    "LabSettings",
    "Node",
    "Notification",
    "PendingEditDialog",
    "PlaybackSummary",
    "PlayerState",
    "StaticEditDialog",
    "StepPlayer",
    "ValidationError",
    "run_algorithm",
]
