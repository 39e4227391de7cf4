"""FastAPI router for the map model and lot editing."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from parcelmap.history.session import EditorSession
from parcelmap.ingest.geojson import FeatureCollectionAdapter, to_feature_collection
from parcelmap.search.protocols import searchable_lots

router = APIRouter()


class LotInfoPatch(BaseModel):
    """Request body for editing a lot's info."""

    changes: dict[str, Any] = Field(default_factory=dict)


def _session(request: Request) -> EditorSession:
    session = getattr(request.app.state, "editor_session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Editor session not available")
    return session


@router.get("/api/map")
async def get_map(request: Request) -> dict[str, Any]:
    """Return the current spatial model."""
    return _session(request).model.to_external()


@router.get("/api/map/statistics")
async def get_map_statistics(request: Request) -> dict[str, Any]:
    return _session(request).model.statistics().model_dump(mode="json")


@router.post("/api/map/generate")
async def generate_map(request: Request) -> dict[str, Any]:
    """Regenerate the model from the configured block layout. Clears history."""
    session = _session(request)
    registry = request.app.state.source_registry
    source = registry.get("generator")
    if source is None:
        raise HTTPException(status_code=503, detail="Generator not available")
    model = session.load(source)
    return model.statistics().model_dump(mode="json")


@router.post("/api/map/import")
async def import_map(body: dict[str, Any], request: Request) -> dict[str, Any]:
    """Replace the model with one parsed from a feature collection. Clears history."""
    session = _session(request)
    adapter = FeatureCollectionAdapter(
        body,
        config=request.app.state.settings.adapter,
        bounds=request.app.state.map_bounds,
    )
    model = session.load(adapter)
    return model.statistics().model_dump(mode="json")


@router.get("/api/map/export")
async def export_map(request: Request) -> dict[str, Any]:
    return to_feature_collection(_session(request).model)


@router.get("/api/lots")
async def list_lots(request: Request, with_area: bool = False) -> list[dict[str, Any]]:
    """List lots in model order, optionally only those with a known area."""
    model = _session(request).model
    lots = searchable_lots(model) if with_area else list(model.iter_lots())
    return [lot.model_dump(mode="json", by_alias=True, exclude_none=True) for lot in lots]


@router.get("/api/lots/{lot_id}")
async def get_lot(lot_id: str, request: Request) -> dict[str, Any]:
    lot = _session(request).model.get_lot(lot_id)
    if lot is None:
        raise HTTPException(status_code=404, detail=f"Lot {lot_id!r} not found")
    return lot.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.patch("/api/lots/{lot_id}/info")
async def update_lot_info(lot_id: str, body: LotInfoPatch, request: Request) -> dict[str, Any]:
    """Merge changes into a lot's info. The edit is recorded in the history."""
    session = _session(request)
    try:
        lot = session.update_lot_info(lot_id, body.changes)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Lot {lot_id!r} not found")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return lot.model_dump(mode="json", by_alias=True, exclude_none=True)
