"""Edit history engine and the editing session built on it."""

from parcelmap.history.engine import EditHistory, HistoryState
from parcelmap.history.session import EditorSession

__all__ = ["EditHistory", "EditorSession", "HistoryState"]
