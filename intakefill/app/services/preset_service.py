"""
Preset service - save, load and share form field layouts
"""
from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Iterable

from pydantic import ValidationError
from sqlalchemy.orm import Session

from intakefill.app.core.config import PRESET_EXPORT_VERSION
from intakefill.app.core.exceptions import PresetImportError, PresetNotFoundError
from intakefill.app.models.form_preset import FormPreset
from intakefill.app.schemas.intake import FieldDescriptor
from intakefill.app.schemas.preset import (
    PresetExport,
    PresetField,
    PresetImportResult,
    PresetOut,
    PresetStats,
    PresetTemplate,
)

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", (name or "").lower())
    return re.sub(r"\s+", "-", slug.strip()) or "preset"


def preset_to_out(preset: FormPreset) -> PresetOut:
    return PresetOut(
        id=preset.id,
        name=preset.name,
        created=preset.created_at,
        lastUsed=preset.last_used,
        fieldCount=preset.field_count or 0,
        fields=[PresetField(**f) for f in (preset.fields or [])],
    )


def preset_field_descriptors(preset: FormPreset) -> list[FieldDescriptor]:
    """Descriptors with values reset, for opening a preset as a document session."""
    return [
        FieldDescriptor(name=f.name, type=f.type, value=None, options=f.options)
        for f in (PresetField(**raw) for raw in (preset.fields or []))
    ]


class PresetService:
    @staticmethod
    def create_template(name: str, fields: Iterable[FieldDescriptor]) -> PresetTemplate:
        """Field structure only; current values are never saved."""
        preset_fields = [PresetField(name=f.name, type=f.type, options=f.options) for f in fields]
        return PresetTemplate(
            name=name,
            created=datetime.utcnow(),
            fieldCount=len(preset_fields),
            fields=preset_fields,
        )

    @staticmethod
    def generate_id(db: Session, name: str) -> str:
        """<slug>-<epoch ms>, bumped until unused."""
        stamp = int(time.time() * 1000)
        preset_id = f"{slugify(name)}-{stamp}"
        while db.get(FormPreset, preset_id) is not None:
            stamp += 1
            preset_id = f"{slugify(name)}-{stamp}"
        return preset_id

    @staticmethod
    def save_preset(db: Session, name: str, template: PresetTemplate) -> FormPreset:
        if not name or not name.strip():
            raise ValueError("Name and template are required")
        now = datetime.utcnow()
        preset = FormPreset(
            id=PresetService.generate_id(db, name),
            name=name.strip(),
            field_count=template.fieldCount,
            fields=[f.model_dump(mode="json") for f in template.fields],
            created_at=template.created or now,
            last_used=now,
        )
        db.add(preset)
        db.commit()
        db.refresh(preset)
        logger.info("Preset saved id=%s fields=%d", preset.id, preset.field_count)
        return preset

    @staticmethod
    def get_preset(db: Session, preset_id: str) -> FormPreset:
        preset = db.get(FormPreset, preset_id)
        if preset is None:
            raise PresetNotFoundError(preset_id)
        return preset

    @staticmethod
    def load_preset(db: Session, preset_id: str) -> FormPreset:
        """Fetch a preset and mark it as just used."""
        preset = PresetService.get_preset(db, preset_id)
        preset.last_used = datetime.utcnow()
        db.commit()
        db.refresh(preset)
        logger.info("Preset loaded id=%s", preset_id)
        return preset

    @staticmethod
    def delete_preset(db: Session, preset_id: str) -> None:
        preset = PresetService.get_preset(db, preset_id)
        db.delete(preset)
        db.commit()
        logger.info("Preset deleted id=%s", preset_id)

    @staticmethod
    def list_presets(db: Session) -> list[FormPreset]:
        """Most recently used first."""
        return db.query(FormPreset).order_by(FormPreset.last_used.desc()).all()

    @staticmethod
    def export_presets(db: Session) -> PresetExport:
        presets = db.query(FormPreset).all()
        return PresetExport(
            version=PRESET_EXPORT_VERSION,
            exported=datetime.utcnow(),
            presets={p.id: preset_to_out(p) for p in presets},
        )

    @staticmethod
    def import_presets(db: Session, payload: str | bytes | dict[str, Any]) -> PresetImportResult:
        """Import an export payload. Every imported preset gets a fresh id."""
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as exc:
                raise PresetImportError("Invalid JSON format") from exc
        if not isinstance(payload, dict) or not isinstance(payload.get("presets"), dict):
            raise PresetImportError("Invalid preset format")

        parsed: list[tuple[str, list[PresetField], datetime | None]] = []
        for raw in payload["presets"].values():
            if not isinstance(raw, dict) or not str(raw.get("name") or "").strip():
                raise PresetImportError("Invalid preset format")
            try:
                fields = [PresetField.model_validate(f) for f in (raw.get("fields") or [])]
                created = PresetOut.model_validate(
                    {"id": "import", "name": raw["name"], "created": raw.get("created")}
                ).created
            except ValidationError as exc:
                raise PresetImportError(f"Invalid preset format: {exc.error_count()} errors") from exc
            if created is not None and created.tzinfo is not None:
                created = created.astimezone(timezone.utc).replace(tzinfo=None)
            parsed.append((str(raw["name"]).strip(), fields, created))

        ids: list[str] = []
        now = datetime.utcnow()
        for name, fields, created in parsed:
            preset = FormPreset(
                id=PresetService.generate_id(db, name),
                name=name,
                field_count=len(fields),
                fields=[f.model_dump(mode="json") for f in fields],
                created_at=created or now,
                last_used=now,
            )
            db.add(preset)
            db.flush()
            ids.append(preset.id)
        db.commit()
        logger.info("Presets imported count=%d", len(ids))
        return PresetImportResult(count=len(ids), ids=ids)

    @staticmethod
    def preset_stats(db: Session) -> PresetStats:
        presets = db.query(FormPreset).all()
        if not presets:
            return PresetStats()
        created = [p.created_at for p in presets if p.created_at is not None]
        return PresetStats(
            total=len(presets),
            totalFields=sum(p.field_count or 0 for p in presets),
            oldestPreset=min(created) if created else None,
            newestPreset=max(created) if created else None,
        )
