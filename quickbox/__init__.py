"""
QuickBox - document state and history engine for the QuickBox mockup editor.

A mockup consists of a shared header and footer plus any number of pages,
each holding positioned boxes. The ``Editor`` is the single command surface:
it owns the document, selection and undo history.
"""

__version__ = "0.3.0"

from .config import Settings, settings
from .editor import EngineState, Editor
from .exceptions import (
    DanglingReference,
    EmptyHistory,
    MalformedDocument,
    PolicyViolation,
    QuickboxError,
)
from .history import HistoryEngine, HistoryKind, Snapshot
from .model import Document, RegionKind
from .regions import RegionLayout
from .selection import Rect, Selection
from .timers import LoopScheduler, ManualScheduler
from .transform import ResizeHandle

__all__ = [
    '__version__',
    'Settings',
    'settings',
    'Editor',
    'EngineState',
    'Document',
    'RegionKind',
    'RegionLayout',
    'Selection',
    'Rect',
    'HistoryEngine',
    'HistoryKind',
    'Snapshot',
    'ResizeHandle',
    'LoopScheduler',
    'ManualScheduler',
    'QuickboxError',
    'PolicyViolation',
    'DanglingReference',
    'MalformedDocument',
    'EmptyHistory',
]
