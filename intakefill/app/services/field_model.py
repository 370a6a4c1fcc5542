"""
Field model - uniform view over a document's fillable fields.

Every field is exposed as a FieldDescriptor (name, type, value, options) and, for
writing, as a typed variant (TextField, CheckBoxField, DropdownField, ...) that
carries its own accessors. Backends:
  - PdfFieldModel: AcroForm PDFs read and written with pypdf
  - InMemoryFieldModel: descriptor-only documents (loaded presets, tests)
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from io import BytesIO
from typing import Any, Iterable

from pypdf import PdfReader, PdfWriter

from intakefill.app.core.exceptions import (
    DocumentLoadError,
    DocumentSerializationError,
    FieldNotFoundError,
    OptionNotAvailableError,
)
from intakefill.app.schemas.intake import FieldDescriptor, FieldKind

logger = logging.getLogger(__name__)

# AcroForm /Ff bits for button fields
_FF_RADIO = 1 << 15
_FF_PUSHBUTTON = 1 << 16
_OFF_STATE = "/Off"
_DEFAULT_ON_STATE = "/Yes"


# --- Typed field variants ---
class FormField:
    kind: FieldKind

    def __init__(self, model: FieldModel, name: str):
        self._model = model
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class TextField(FormField):
    kind = FieldKind.TEXT

    def get_text(self) -> str:
        value = self._model._value(self.name)
        return "" if value is None else str(value)

    def set_text(self, text: str) -> None:
        self._model._assign(self.name, str(text))


class CheckBoxField(FormField):
    kind = FieldKind.CHECKBOX

    def is_checked(self) -> bool:
        return bool(self._model._value(self.name))

    def check(self) -> None:
        self._model._assign(self.name, True)

    def uncheck(self) -> None:
        self._model._assign(self.name, False)


class _ChoiceField(FormField):
    def get_options(self) -> list[str]:
        return list(self._model._options(self.name))

    def get_selected(self) -> str:
        value = self._model._value(self.name)
        return "" if value is None else str(value)

    def select(self, value: str) -> None:
        value = str(value)
        options = self.get_options()
        if value not in options:
            raise OptionNotAvailableError(self.name, value, options)
        self._model._assign(self.name, value)


class DropdownField(_ChoiceField):
    kind = FieldKind.DROPDOWN


class RadioGroupField(_ChoiceField):
    kind = FieldKind.RADIO_GROUP


class ButtonField(FormField):
    kind = FieldKind.BUTTON


class SignatureField(FormField):
    kind = FieldKind.SIGNATURE


_FIELD_CLASSES: dict[FieldKind, type[FormField]] = {
    FieldKind.TEXT: TextField,
    FieldKind.CHECKBOX: CheckBoxField,
    FieldKind.DROPDOWN: DropdownField,
    FieldKind.RADIO_GROUP: RadioGroupField,
    FieldKind.BUTTON: ButtonField,
    FieldKind.SIGNATURE: SignatureField,
}


# --- Models ---
class FieldModel(ABC):
    """Ordered collection of named fields. Field names are unique per document."""

    def __init__(self, descriptors: Iterable[FieldDescriptor] = ()):
        self._fields: dict[str, FieldDescriptor] = {}
        for descriptor in descriptors:
            self._fields[descriptor.name] = descriptor.model_copy(deep=True)

    def get_fields(self) -> list[FieldDescriptor]:
        return [d.model_copy(deep=True) for d in self._fields.values()]

    def field_names(self) -> list[str]:
        return list(self._fields)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_field(self, name: str) -> FormField:
        descriptor = self._fields.get(name)
        if descriptor is None:
            raise FieldNotFoundError(name, self._fields)
        return _FIELD_CLASSES[descriptor.type](self, name)

    def __len__(self) -> int:
        return len(self._fields)

    def _value(self, name: str) -> Any:
        return self._fields[name].value

    def _options(self, name: str) -> list[str]:
        return self._fields[name].options or []

    def _assign(self, name: str, value: Any) -> None:
        descriptor = self._fields[name]
        descriptor.value = value
        self._write(descriptor)

    def _write(self, descriptor: FieldDescriptor) -> None:
        """Backend hook called after a field value changes."""

    @abstractmethod
    def copy(self) -> FieldModel:
        """Independent copy of the document; writes to it never touch self."""

    @abstractmethod
    def save(self) -> bytes:
        """Serialize the document with its current values."""


class InMemoryFieldModel(FieldModel):
    def copy(self) -> InMemoryFieldModel:
        return type(self)(self._fields.values())

    def save(self) -> bytes:
        values = {name: d.value for name, d in self._fields.items()}
        return json.dumps(values, sort_keys=True).encode("utf-8")


def _option_label(option: Any) -> str:
    # /Opt entries are either strings or [export, display] pairs
    if isinstance(option, (list, tuple)) and option:
        return str(option[0])
    return str(option)


def _classify(field: Any) -> FieldKind | None:
    field_type = field.get("/FT")
    flags = int(field.get("/Ff", 0) or 0)
    if field_type == "/Tx":
        return FieldKind.TEXT
    if field_type == "/Ch":
        return FieldKind.DROPDOWN
    if field_type == "/Sig":
        return FieldKind.SIGNATURE
    if field_type == "/Btn":
        if flags & _FF_PUSHBUTTON:
            return FieldKind.BUTTON
        if flags & _FF_RADIO:
            return FieldKind.RADIO_GROUP
        return FieldKind.CHECKBOX
    return None


def _descriptor_from_pdf(name: str, field: Any, kind: FieldKind) -> tuple[FieldDescriptor, str]:
    """Build a descriptor and the checkbox on-state name for one AcroForm field."""
    raw_value = field.get("/V")
    states = [str(s) for s in (field.get("/_States_") or [])]
    on_state = next((s for s in states if s != _OFF_STATE), _DEFAULT_ON_STATE)

    if kind == FieldKind.TEXT:
        return FieldDescriptor(name=name, type=kind, value="" if raw_value is None else str(raw_value)), on_state
    if kind == FieldKind.CHECKBOX:
        checked = raw_value is not None and str(raw_value) != _OFF_STATE
        return FieldDescriptor(name=name, type=kind, value=checked), on_state
    if kind == FieldKind.DROPDOWN:
        options = [_option_label(o) for o in (field.get("/Opt") or [])]
        if isinstance(raw_value, list):
            raw_value = raw_value[0] if raw_value else None
        value = "" if raw_value is None else str(raw_value)
        return FieldDescriptor(name=name, type=kind, value=value, options=options), on_state
    if kind == FieldKind.RADIO_GROUP:
        options = [s.lstrip("/") for s in states if s != _OFF_STATE]
        value = ""
        if raw_value is not None and str(raw_value) != _OFF_STATE:
            value = str(raw_value).lstrip("/")
        return FieldDescriptor(name=name, type=kind, value=value, options=options), on_state
    if kind == FieldKind.BUTTON:
        return FieldDescriptor(name=name, type=kind, value=name), on_state
    return FieldDescriptor(name=name, type=kind, value=None), on_state


class PdfFieldModel(FieldModel):
    """AcroForm PDF. Writes are buffered and applied on save()."""

    def __init__(self, data: bytes, descriptors: Iterable[FieldDescriptor], on_states: dict[str, str]):
        super().__init__(descriptors)
        self._source = data
        self._on_states = dict(on_states)
        self._pending: dict[str, str] = {}

    @classmethod
    def from_bytes(cls, data: bytes) -> PdfFieldModel:
        if not data:
            raise DocumentLoadError("PDF is empty")
        try:
            reader = PdfReader(BytesIO(data))
            raw_fields = reader.get_fields() or {}
        except Exception as exc:
            raise DocumentLoadError(f"Could not read PDF form: {exc}") from exc

        descriptors: list[FieldDescriptor] = []
        on_states: dict[str, str] = {}
        for name, field in raw_fields.items():
            kind = _classify(field)
            if kind is None:
                # Non-terminal container nodes carry no /FT
                continue
            descriptor, on_state = _descriptor_from_pdf(name, field, kind)
            descriptors.append(descriptor)
            on_states[name] = on_state
        logger.debug("PDF form loaded bytes=%d fields=%d", len(data), len(descriptors))
        return cls(data, descriptors, on_states)

    def _write(self, descriptor: FieldDescriptor) -> None:
        if descriptor.type == FieldKind.CHECKBOX:
            pdf_value = self._on_states.get(descriptor.name, _DEFAULT_ON_STATE) if descriptor.value else _OFF_STATE
        elif descriptor.type == FieldKind.RADIO_GROUP:
            pdf_value = f"/{descriptor.value}"
        else:
            pdf_value = str(descriptor.value)
        self._pending[descriptor.name] = pdf_value

    def copy(self) -> PdfFieldModel:
        return PdfFieldModel.from_bytes(self.save())

    def save(self) -> bytes:
        if not self._pending:
            return self._source
        try:
            writer = PdfWriter(clone_from=PdfReader(BytesIO(self._source)))
            for page in writer.pages:
                if "/Annots" in page:
                    writer.update_page_form_field_values(page, self._pending)
            buffer = BytesIO()
            writer.write(buffer)
        except Exception as exc:
            raise DocumentSerializationError(f"Could not write filled PDF: {exc}") from exc
        return buffer.getvalue()
