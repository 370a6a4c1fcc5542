"""
Preset Pydantic schemas - saved field layouts and their JSON export format
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from intakefill.app.schemas.intake import FieldKind


class PresetField(BaseModel):
    name: str
    type: FieldKind
    options: Optional[List[str]] = None


class PresetTemplate(BaseModel):
    """Field structure of a loaded document, ready to be saved under a name."""
    name: str
    created: datetime
    fieldCount: int = 0
    fields: List[PresetField] = Field(default_factory=list)


class PresetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    created: Optional[datetime] = None
    lastUsed: Optional[datetime] = None
    fieldCount: int = 0
    fields: List[PresetField] = Field(default_factory=list)


class PresetSummary(BaseModel):
    id: str
    name: str
    fieldCount: int = 0
    lastUsed: Optional[datetime] = None


class PresetSaveIn(BaseModel):
    name: str = Field(..., min_length=1)
    document_id: str


class PresetExport(BaseModel):
    version: str
    exported: datetime
    presets: Dict[str, PresetOut]


class PresetImportResult(BaseModel):
    count: int
    ids: List[str]


class PresetStats(BaseModel):
    total: int = 0
    totalFields: int = 0
    oldestPreset: Optional[datetime] = None
    newestPreset: Optional[datetime] = None
