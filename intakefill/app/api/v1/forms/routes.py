"""
Form API routes - upload a fillable PDF, feed it intake notes, fill and download.
Documents live in short-lived in-memory sessions keyed by document_id.
"""
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response

from intakefill.app.core.config import PDF_MEDIA_TYPE, settings
from intakefill.app.core.dependencies import get_document_session
from intakefill.app.core.exceptions import (
    DocumentLoadError,
    DocumentSerializationError,
    DocumentUnavailableError,
)
from intakefill.app.core.logging_config import get_logger
from intakefill.app.schemas.intake import (
    DocumentOut,
    FieldAnalysis,
    FillOut,
    IntakeOut,
    IntakeTextIn,
    SemanticKey,
)
from intakefill.app.services.document_store import DocumentSession, open_pdf_session
from intakefill.app.services.field_mapping import analyze_fields
from intakefill.app.services.form_data_mapper import map_to_form_data
from intakefill.app.services.form_filler import (
    build_fill_filename,
    build_preview,
    filling_stats,
    validate_form_data,
)
from intakefill.app.services.intake_extractor import parse_intake

logger = get_logger("api.forms")
router = APIRouter()


def document_out(session: DocumentSession) -> DocumentOut:
    fields = session.fields
    return DocumentOut(
        document_id=session.document_id,
        source=session.source,
        has_document=session.has_document,
        field_count=len(fields),
        fields=fields,
        mappings=session.table.to_dict(),
        form_data=session.filler.get_current_form_data(),
    )


def check_intake_text(text: str) -> str:
    if len(text) > settings.max_intake_chars:
        raise HTTPException(
            status_code=413,
            detail=f"Intake text too long (max {settings.max_intake_chars} characters)",
        )
    return text


@router.post("/upload", response_model=DocumentOut)
async def upload_form(file: UploadFile = File(...)):
    """Load a fillable PDF and build its field mapping table."""
    filename = file.filename or ""
    if file.content_type not in (PDF_MEDIA_TYPE, "application/octet-stream") and not filename.lower().endswith(".pdf"):
        raise HTTPException(status_code=400, detail="Please upload a PDF file")
    contents = await file.read()
    if len(contents) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="PDF too large")
    try:
        session = open_pdf_session(contents)
    except DocumentLoadError as e:
        logger.warning("PDF upload rejected filename=%s error=%s", filename, e)
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("PDF uploaded filename=%s document_id=%s", filename, session.document_id)
    return document_out(session)


@router.get("/{document_id}", response_model=DocumentOut)
def get_form(session: DocumentSession = Depends(get_document_session)):
    return document_out(session)


@router.get("/{document_id}/analysis", response_model=FieldAnalysis)
def get_form_analysis(session: DocumentSession = Depends(get_document_session)):
    """Field type counts, mapping coverage and naming issues."""
    return analyze_fields(session.fields, session.table)


@router.post("/{document_id}/intake", response_model=IntakeOut)
def submit_intake(payload: IntakeTextIn, session: DocumentSession = Depends(get_document_session)):
    """
    Extract client details from intake notes, map them onto this document's fields
    and merge into the accumulated FormData.
    """
    text = check_intake_text(payload.text)
    record = parse_intake(text)
    mapped = map_to_form_data(record, session.table, text)
    form_data = session.filler.merge_form_data(mapped)
    fields = session.fields
    return IntakeOut(
        extracted=record,
        mapped=mapped,
        form_data=form_data,
        preview=build_preview(form_data, fields),
        stats=filling_stats(form_data, len(fields)),
        validation=validate_form_data(form_data, fields),
    )


@router.delete("/{document_id}/form-data")
def clear_form_data(session: DocumentSession = Depends(get_document_session)):
    session.filler.clear_form_data()
    return {"ok": True}


@router.post("/{document_id}/fill", response_model=FillOut)
async def fill_form(session: DocumentSession = Depends(get_document_session)):
    """Fill a copy of the document with the accumulated FormData."""
    try:
        result = await session.filler.fill_form(session.filler.get_current_form_data())
    except DocumentUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DocumentLoadError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return FillOut(
        state=result.state,
        success_count=result.success_count,
        failure_count=result.failure_count,
        outcomes=result.outcomes,
    )


@router.post("/{document_id}/download")
async def download_filled_form(session: DocumentSession = Depends(get_document_session)):
    """Filled PDF as an attachment named after the client."""
    form_data = session.filler.get_current_form_data()
    client_field = session.table.get(SemanticKey.CLIENT_NAME)
    client_name = form_data.get(client_field) if client_field else None
    filename = build_fill_filename(client_name if isinstance(client_name, str) else None, date.today())
    try:
        filled = await session.filler.render_filled_document(form_data, filename)
    except DocumentUnavailableError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (DocumentLoadError, DocumentSerializationError) as e:
        raise HTTPException(status_code=500, detail=str(e))
    return Response(
        content=filled.content,
        media_type=PDF_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filled.filename}"',
            "X-Fill-Success-Count": str(filled.result.success_count),
            "X-Fill-Failure-Count": str(filled.result.failure_count),
        },
    )
