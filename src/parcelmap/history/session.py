"""Editing session: a spatial model wrapped in an edit history."""

from __future__ import annotations

import logging
from typing import Any

from parcelmap.core.config import HistoryConfig
from parcelmap.history.engine import EditHistory
from parcelmap.ingest.base import SpatialSource
from parcelmap.spatial.models import STRICT_FIELDS, Lot, LotInfo, SpatialModel, utcnow

logger = logging.getLogger(__name__)

# LotInfo fields that edits may not set directly.
_READ_ONLY_INFO_FIELDS = frozenset({"id", "block", "lot", "created_at", "updated_at"})


class EditorSession:
    """Application-layer owner of the model being edited.

    Every user mutation produces a new SpatialModel that is committed to
    the history; loading a new source resets the history instead.
    """

    def __init__(
        self,
        model: SpatialModel | None = None,
        config: HistoryConfig | None = None,
    ) -> None:
        config = config or HistoryConfig()
        self._history: EditHistory[SpatialModel] = EditHistory(
            model if model is not None else SpatialModel(),
            equality=config.equality,
        )

    @property
    def history(self) -> EditHistory[SpatialModel]:
        return self._history

    @property
    def model(self) -> SpatialModel:
        return self._history.present

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    def load(self, source: SpatialSource) -> SpatialModel:
        """Build a model from *source* and start a fresh history with it."""
        model = source.build()
        self._history.reset(model)
        logger.info("Loaded %d lots from source %r", model.lot_count, source.name)
        return model

    def update_lot_info(self, lot_id: str, changes: dict[str, Any]) -> Lot:
        """Merge *changes* into a lot's info and commit the new model.

        Raises KeyError for an unknown lot, and ValueError when an identity
        field is targeted or a changed value does not parse as its field
        type. Changes that leave the info as it was are not recorded.
        """
        lot = self.model.get_lot(lot_id)
        if lot is None:
            raise KeyError(lot_id)
        forbidden = _READ_ONLY_INFO_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Read-only lot info fields: {sorted(forbidden)}")

        candidate = LotInfo.model_validate(
            {**lot.info.model_dump(), **changes},
            context={STRICT_FIELDS: frozenset(changes)},
        )
        if candidate == lot.info:
            return lot

        updated = lot.model_copy(update={
            "info": candidate.model_copy(update={"updated_at": utcnow()}),
        })
        self._history.set(self.model.replace_lot(updated))
        return updated

    def undo(self) -> bool:
        return self._history.undo()

    def redo(self) -> bool:
        return self._history.redo()
