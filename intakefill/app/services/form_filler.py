"""
Form filler - writes FormData into a copy of the loaded document.

Fill states: NotStarted -> InProgress -> Completed (possibly with field failures)
or Aborted (no document, or the document copy itself failed). Field-level problems
never abort the run; each becomes a FieldOutcome.
"""
from __future__ import annotations

import asyncio
import logging
import re
import time
from datetime import date
from typing import Any, Mapping, NamedTuple, Optional

from intakefill.app.core.config import (
    FILLED_FILENAME_DEFAULT_CLIENT,
    FILLED_FILENAME_TEMPLATE,
    PREVIEW_MAX_VALUE_CHARS,
)
from intakefill.app.core.exceptions import (
    DocumentLoadError,
    DocumentSerializationError,
    DocumentUnavailableError,
    IntakeFillError,
)
from intakefill.app.schemas.intake import (
    FieldDescriptor,
    FieldKind,
    FieldOutcome,
    FieldOutcomeKind,
    FillingStats,
    FillResult,
    FillState,
    FormData,
    FormValue,
    PreviewItem,
    ValidationReport,
)
from intakefill.app.services.field_model import (
    CheckBoxField,
    DropdownField,
    FieldModel,
    FormField,
    RadioGroupField,
    TextField,
)
from intakefill.app.services.form_data_mapper import merge_form_data

logger = logging.getLogger(__name__)


class FilledDocument(NamedTuple):
    filename: str
    content: bytes
    result: FillResult


class FormFiller:
    """Owns the accumulated FormData for one document and fills copies of it."""

    def __init__(self, document: FieldModel | None = None, log: logging.Logger | None = None):
        self._document = document
        self._form_data: FormData = {}
        self._log = log or logger
        self.state = FillState.NOT_STARTED

    @property
    def document(self) -> FieldModel | None:
        return self._document

    # --- FormData accumulator ---
    def merge_form_data(self, new_data: Mapping[str, FormValue]) -> FormData:
        self._form_data = merge_form_data(self._form_data, new_data)
        return dict(self._form_data)

    def get_current_form_data(self) -> FormData:
        return dict(self._form_data)

    def clear_form_data(self) -> None:
        self._form_data = {}

    # --- Filling ---
    async def fill_form(self, form_data: Mapping[str, FormValue], log: logging.Logger | None = None) -> FillResult:
        log = log or self._log
        log.info("Starting form filling fields=%d", len(form_data))
        if self._document is None:
            self.state = FillState.ABORTED
            log.error("Form filling aborted: no document loaded")
            raise DocumentUnavailableError()

        started_at = time.monotonic()
        self.state = FillState.IN_PROGRESS
        try:
            document = await asyncio.to_thread(self._document.copy)
        except IntakeFillError:
            self.state = FillState.ABORTED
            log.exception("Form filling aborted: document copy failed")
            raise
        except Exception as exc:
            self.state = FillState.ABORTED
            log.exception("Form filling aborted: document copy failed")
            raise DocumentLoadError(f"Could not copy document: {exc}") from exc

        available = document.field_names()
        log.debug("Found %d form fields in document names=%s", len(available), available)

        result = FillResult(document_handle=document, state=FillState.IN_PROGRESS)
        for field_name, value in form_data.items():
            outcome = self._fill_field(document, field_name, value, available, log)
            result.outcomes.append(outcome)
            if outcome.outcome == FieldOutcomeKind.SUCCESS:
                result.success_count += 1
            else:
                result.failure_count += 1

        result.state = FillState.COMPLETED
        self.state = FillState.COMPLETED
        log.info(
            "Form filling completed total=%d successful=%d failed=%d elapsed_ms=%d",
            len(form_data),
            result.success_count,
            result.failure_count,
            int((time.monotonic() - started_at) * 1000),
        )
        return result

    def _fill_field(
        self,
        document: FieldModel,
        field_name: str,
        value: Any,
        available: list[str],
        log: logging.Logger,
    ) -> FieldOutcome:
        log.debug("Attempting to fill field=%r value=%r value_type=%s", field_name, value, type(value).__name__)
        if not document.has_field(field_name):
            log.error("Field %r does not exist in document available=%s", field_name, available)
            return FieldOutcome(
                field_name=field_name,
                outcome=FieldOutcomeKind.FIELD_NOT_FOUND,
                reason=f"Field not found. Available fields: {', '.join(available)}",
            )
        try:
            field = document.get_field(field_name)
            return self._apply(field, value, log)
        except Exception as exc:
            log.error("Failed to fill field=%r error=%s", field_name, exc)
            return FieldOutcome(field_name=field_name, outcome=FieldOutcomeKind.FIELD_ERROR, reason=str(exc))

    @staticmethod
    def _apply(field: FormField, value: Any, log: logging.Logger) -> FieldOutcome:
        name = field.name
        if field.kind == FieldKind.TEXT:
            assert isinstance(field, TextField)
            field.set_text(str(value))
            log.debug("Filled text field=%r", name)
            return FieldOutcome(field_name=name, outcome=FieldOutcomeKind.SUCCESS)

        if field.kind == FieldKind.CHECKBOX:
            assert isinstance(field, CheckBoxField)
            if value:
                field.check()
            else:
                field.uncheck()
            log.debug("Filled checkbox field=%r checked=%s", name, bool(value))
            return FieldOutcome(field_name=name, outcome=FieldOutcomeKind.SUCCESS)

        if field.kind in (FieldKind.DROPDOWN, FieldKind.RADIO_GROUP):
            assert isinstance(field, (DropdownField, RadioGroupField))
            string_value = str(value)
            options = field.get_options()
            if string_value not in options:
                log.warning(
                    "Value %r not in %s options field=%r available=%s",
                    string_value, field.kind.value, name, options,
                )
                return FieldOutcome(
                    field_name=name,
                    outcome=FieldOutcomeKind.OPTION_NOT_AVAILABLE,
                    reason=f'Value "{string_value}" not in options: {", ".join(options)}',
                )
            field.select(string_value)
            log.debug("Selected field=%r value=%r", name, string_value)
            return FieldOutcome(field_name=name, outcome=FieldOutcomeKind.SUCCESS)

        log.warning("Unsupported field type field=%r type=%s", name, field.kind.value)
        return FieldOutcome(
            field_name=name,
            outcome=FieldOutcomeKind.UNSUPPORTED_FIELD_TYPE,
            reason=f"Unsupported field type: {field.kind.value}",
        )

    async def render_filled_document(
        self,
        form_data: Mapping[str, FormValue],
        filename: str,
        log: logging.Logger | None = None,
    ) -> FilledDocument:
        """Fill a copy and serialize it. Empty output is a serialization failure."""
        log = log or self._log
        result = await self.fill_form(form_data, log=log)
        try:
            content = await asyncio.to_thread(result.document_handle.save)
        except IntakeFillError:
            log.exception("Filled document serialization failed filename=%s", filename)
            raise
        except Exception as exc:
            log.exception("Filled document serialization failed filename=%s", filename)
            raise DocumentSerializationError(f"Could not serialize filled document: {exc}") from exc
        if not content:
            raise DocumentSerializationError("Generated document is empty")
        log.info("Filled document generated filename=%s size_kb=%d", filename, round(len(content) / 1024))
        return FilledDocument(filename=filename, content=content, result=result)


def build_fill_filename(client_name: Optional[str], today: date | None = None) -> str:
    client = re.sub(r"\s+", "-", (client_name or "").strip()) or FILLED_FILENAME_DEFAULT_CLIENT
    client = re.sub(r"[^\w\-.]", "", client) or FILLED_FILENAME_DEFAULT_CLIENT
    return FILLED_FILENAME_TEMPLATE.format(client=client, date=(today or date.today()).isoformat())


def format_preview_value(value: Any) -> str:
    if isinstance(value, bool):
        return "Checked" if value else "Unchecked"
    if isinstance(value, str) and len(value) > PREVIEW_MAX_VALUE_CHARS:
        return value[:PREVIEW_MAX_VALUE_CHARS] + "..."
    return "" if value is None else str(value)


def build_preview(form_data: Mapping[str, FormValue], fields: list[FieldDescriptor]) -> list[PreviewItem]:
    """Fields that will be filled plus the ones that stay empty, sorted by name."""
    preview: list[PreviewItem] = []
    by_name = {field.name: field for field in fields}
    for field_name, value in form_data.items():
        field = by_name.get(field_name)
        if field is None:
            continue
        preview.append(PreviewItem(
            fieldName=field.name,
            fieldType=field.type,
            value=value,
            display=format_preview_value(value),
            filled=True,
        ))
    for field in fields:
        if field.name not in form_data:
            preview.append(PreviewItem(
                fieldName=field.name,
                fieldType=field.type,
                value=field.value if field.value is not None else "",
                display=format_preview_value(field.value),
                filled=False,
            ))
    return sorted(preview, key=lambda item: item.fieldName.lower())


def filling_stats(form_data: Mapping[str, FormValue], total_fields: int) -> FillingStats:
    filled = len(form_data)
    percentage = f"{filled / total_fields * 100:.1f}" if total_fields > 0 else "0"
    return FillingStats(
        totalFields=total_fields,
        filledFields=filled,
        emptyFields=total_fields - filled,
        fillPercentage=f"{percentage}%",
    )


def validate_form_data(form_data: Mapping[str, FormValue], fields: list[FieldDescriptor]) -> ValidationReport:
    """Unknown fields are errors; type mismatches and unknown options are warnings."""
    errors: list[str] = []
    warnings: list[str] = []
    by_name = {field.name: field for field in fields}
    for field_name, value in form_data.items():
        field = by_name.get(field_name)
        if field is None:
            errors.append(f'Field "{field_name}" not found in document')
            continue
        if field.type == FieldKind.TEXT and not isinstance(value, str):
            warnings.append(f'Field "{field_name}" expects text but got {type(value).__name__}')
        elif field.type == FieldKind.CHECKBOX and not isinstance(value, bool):
            warnings.append(f'Field "{field_name}" expects boolean but got {type(value).__name__}')
        elif field.type in (FieldKind.DROPDOWN, FieldKind.RADIO_GROUP) and field.options is not None \
                and str(value) not in field.options:
            warnings.append(
                f'Field "{field_name}" value "{value}" not in available options: {", ".join(field.options)}'
            )
    return ValidationReport(isValid=not errors, errors=errors, warnings=warnings)
