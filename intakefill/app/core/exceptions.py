"""
Domain errors for intake extraction, field filling and presets.

Structural errors (document unavailable / load / serialize) abort a fill and are
raised to the caller. Field-level errors are raised by the field model and
recovered by the filler into per-field outcomes.
"""
from __future__ import annotations

from typing import Iterable


class IntakeFillError(Exception):
    """Base class for all intakefill errors."""


# --- Structural ---
class DocumentUnavailableError(IntakeFillError):
    def __init__(self, message: str = "No PDF document loaded"):
        super().__init__(message)


class DocumentLoadError(IntakeFillError):
    """The document could not be read or copied."""


class DocumentSerializationError(IntakeFillError):
    """The filled document could not be written out."""


# --- Per field ---
class FieldNotFoundError(IntakeFillError):
    def __init__(self, field_name: str, available: Iterable[str] = ()):
        self.field_name = field_name
        self.available = list(available)
        super().__init__(f'Field "{field_name}" does not exist in document')


class OptionNotAvailableError(IntakeFillError):
    def __init__(self, field_name: str, value: str, options: Iterable[str] = ()):
        self.field_name = field_name
        self.value = value
        self.options = list(options)
        super().__init__(f'Value "{value}" not in options for field "{field_name}"')


# --- Presets ---
class PresetNotFoundError(IntakeFillError):
    def __init__(self, preset_id: str):
        self.preset_id = preset_id
        super().__init__(f"Preset not found: {preset_id}")


class PresetImportError(IntakeFillError):
    """Import payload is not valid preset JSON."""
