"""
Short-lived document sessions: a loaded PDF (or preset) with its mapping table
and the filler that accumulates FormData for it.
In-memory LRU + TTL, keyed by a random document id.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Literal, Optional

from intakefill.app.core.config import settings
from intakefill.app.schemas.intake import FieldDescriptor
from intakefill.app.services.field_mapping import FieldMappingTable, build_field_mappings
from intakefill.app.services.field_model import FieldModel, InMemoryFieldModel, PdfFieldModel
from intakefill.app.services.form_filler import FormFiller

logger = logging.getLogger(__name__)


@dataclass
class DocumentSession:
    document_id: str
    source: Literal["pdf", "preset"]
    model: FieldModel
    table: FieldMappingTable
    filler: FormFiller
    preset_id: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    @property
    def fields(self) -> list[FieldDescriptor]:
        return self.model.get_fields()

    @property
    def has_document(self) -> bool:
        return self.filler.document is not None


_sessions: OrderedDict[str, tuple[DocumentSession, float]] = OrderedDict()
_lock = threading.Lock()


def _put(session: DocumentSession) -> DocumentSession:
    with _lock:
        while len(_sessions) >= settings.document_session_max_entries and _sessions:
            evicted, _ = _sessions.popitem(last=False)
            logger.debug("Document session evicted id=%s", evicted)
        _sessions[session.document_id] = (session, time.time() + settings.document_session_ttl)
        _sessions.move_to_end(session.document_id)
    logger.info(
        "Document session opened id=%s source=%s fields=%d mapped=%d",
        session.document_id, session.source, len(session.model), len(session.table),
    )
    return session


def open_pdf_session(data: bytes) -> DocumentSession:
    """Load a fillable PDF. Raises DocumentLoadError if it cannot be read."""
    model = PdfFieldModel.from_bytes(data)
    table = build_field_mappings(model.get_fields())
    return _put(DocumentSession(
        document_id=uuid.uuid4().hex,
        source="pdf",
        model=model,
        table=table,
        filler=FormFiller(model),
    ))


def open_preset_session(preset_id: str, fields: list[FieldDescriptor]) -> DocumentSession:
    """Field structure only: the mapping table works but there is no PDF to fill."""
    model = InMemoryFieldModel(fields)
    table = build_field_mappings(model.get_fields())
    return _put(DocumentSession(
        document_id=uuid.uuid4().hex,
        source="preset",
        model=model,
        table=table,
        filler=FormFiller(None),
        preset_id=preset_id,
    ))


def get_session(document_id: str) -> Optional[DocumentSession]:
    """Returns None on miss or expiry."""
    with _lock:
        entry = _sessions.get(document_id)
        if entry is None:
            return None
        session, expiry = entry
        if time.time() > expiry:
            del _sessions[document_id]
            return None
        _sessions.move_to_end(document_id)
        return session


def close_session(document_id: str) -> bool:
    with _lock:
        return _sessions.pop(document_id, None) is not None


def clear() -> None:
    """Clear all sessions (for tests)."""
    with _lock:
        _sessions.clear()
