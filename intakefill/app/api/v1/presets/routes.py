"""
Preset API routes - save a loaded form's field layout, reopen it later, share as JSON.
"""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from intakefill.app.api.v1.forms.routes import document_out
from intakefill.app.core.dependencies import get_db
from intakefill.app.core.exceptions import PresetImportError, PresetNotFoundError
from intakefill.app.core.logging_config import get_logger
from intakefill.app.schemas.intake import DocumentOut
from intakefill.app.schemas.preset import (
    PresetExport,
    PresetImportResult,
    PresetOut,
    PresetSaveIn,
    PresetStats,
    PresetSummary,
)
from intakefill.app.services.document_store import get_session, open_preset_session
from intakefill.app.services.preset_service import (
    PresetService,
    preset_field_descriptors,
    preset_to_out,
)

logger = get_logger("api.presets")
router = APIRouter()


@router.get("", response_model=list[PresetSummary])
def list_presets(db: Session = Depends(get_db)):
    """Saved presets, most recently used first."""
    return [
        PresetSummary(id=p.id, name=p.name, fieldCount=p.field_count or 0, lastUsed=p.last_used)
        for p in PresetService.list_presets(db)
    ]


@router.post("", response_model=PresetOut)
def save_preset(payload: PresetSaveIn, db: Session = Depends(get_db)):
    """Save the field structure of a loaded document under a name."""
    session = get_session(payload.document_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Document session not found or expired")
    template = PresetService.create_template(payload.name, session.fields)
    try:
        preset = PresetService.save_preset(db, payload.name, template)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return preset_to_out(preset)


@router.get("/stats", response_model=PresetStats)
def get_preset_stats(db: Session = Depends(get_db)):
    return PresetService.preset_stats(db)


@router.get("/export", response_model=PresetExport)
def export_presets(db: Session = Depends(get_db)):
    return PresetService.export_presets(db)


@router.post("/import", response_model=PresetImportResult)
def import_presets(payload: Any = Body(...), db: Session = Depends(get_db)):
    """Import an export payload; every preset gets a new id."""
    try:
        return PresetService.import_presets(db, payload)
    except PresetImportError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{preset_id}", response_model=PresetOut)
def get_preset(preset_id: str, db: Session = Depends(get_db)):
    try:
        return preset_to_out(PresetService.get_preset(db, preset_id))
    except PresetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{preset_id}/load", response_model=DocumentOut)
def load_preset(preset_id: str, db: Session = Depends(get_db)):
    """
    Open a document session from a preset. Intake mapping works against it, but
    there is no PDF behind it, so fill/download answer 409 until a PDF is uploaded.
    """
    try:
        preset = PresetService.load_preset(db, preset_id)
    except PresetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    session = open_preset_session(preset.id, preset_field_descriptors(preset))
    logger.info("Preset session opened preset_id=%s document_id=%s", preset.id, session.document_id)
    return document_out(session)


@router.delete("/{preset_id}")
def delete_preset(preset_id: str, db: Session = Depends(get_db)):
    try:
        PresetService.delete_preset(db, preset_id)
    except PresetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"ok": True}
