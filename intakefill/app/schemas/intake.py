"""
Intake / form-fill Pydantic schemas - extracted record, field descriptors, fill results
"""
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

FormValue = Union[str, bool]
FormData = Dict[str, FormValue]


class FieldKind(str, Enum):
    TEXT = "Text"
    CHECKBOX = "CheckBox"
    DROPDOWN = "Dropdown"
    RADIO_GROUP = "RadioGroup"
    BUTTON = "Button"
    SIGNATURE = "Signature"


class SemanticKey(str, Enum):
    """Fixed set of form concepts the mapper knows how to fill."""
    # Client info
    CLIENT_NAME = "clientName"
    BOOK_TITLE = "bookTitle"
    EMAIL = "email"
    PHONE = "phone"
    WORD_COUNT = "wordCount"
    # Manuscript type
    FICTION_MANUSCRIPT = "fictionManuscript"
    NONFICTION_MANUSCRIPT = "nonfictionManuscript"
    # Editing tiers
    PROOFREADING_ONLY = "proofreadingOnly"
    DEVELOPMENTAL_EDITING = "developmentalEditing"
    LINE_EDITING = "lineEditing"
    COPY_EDITING_PROOFREADING = "copyEditingProofreadingCombined"
    PROOFREADING = "proofreading"
    # Publishing
    BOOK_DESIGN_PRODUCTION = "bookDesignProduction"
    AMAZON_INGRAMSPARK = "amazonIngramSpark"
    PRINT_ON_DEMAND = "printOnDemand"
    COPYRIGHT = "copyright"
    # Marketing
    BESTSELLER_CAMPAIGN_FREE = "bestsellerCampaignFree"
    BESTSELLER_CAMPAIGN_PAID = "bestsellerCampaignPaid"
    BARNES_NOBLE_BESTSELLER = "barnesNobleBestseller"
    AUTHOR_WEBSITE = "authorWebsite"
    AUTHOR_WEBSITE_PREMIUM = "authorWebsitePremium"
    PRESS_RELEASE = "pressRelease"
    AUTHOR_WIKI_PAGE = "authorWikiPage"
    # Bestseller campaign tiers
    BRONZE_CAMPAIGN = "bronzeCampaign"
    SILVER_CAMPAIGN = "silverCampaign"
    GOLD_CAMPAIGN = "goldCampaign"
    # Sales boost tiers
    SALES_BOOST_250 = "salesBoost250"
    SALES_BOOST_500 = "salesBoost500"
    SALES_BOOST_750 = "salesBoost750"
    SALES_BOOST_1000 = "salesBoost1000"
    # Additional services
    AUDIOBOOK_PRODUCTION = "audiobookProduction"
    BOOK_VIDEO_TRAILER = "bookVideoTrailer"
    MARKETING_IMAGES = "marketingImages"
    EDITORIAL_REVIEW = "editorialReview"
    INTERVIEW_SHOW = "interviewShow"
    # Other
    INTERIOR_IMAGES = "interiorImages"
    AI_GENERATED = "aiGenerated"
    EXISTING_AMAZON_LISTING = "existingAmazonListing"


# --- Extraction ---
class ServiceMentions(BaseModel):
    editing: List[str] = Field(default_factory=list)
    marketing: List[str] = Field(default_factory=list)
    publishing: List[str] = Field(default_factory=list)


class ExtractedRecord(BaseModel):
    """Normalized intake record. Every scalar is None when not found."""
    clientName: Optional[str] = None
    bookTitle: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    wordCount: Optional[int] = None
    genre: Optional[str] = None
    manuscriptType: Optional[Literal["fiction", "nonfiction"]] = None
    services: ServiceMentions = Field(default_factory=ServiceMentions)
    budget: Optional[int] = None


# --- Field model ---
class FieldDescriptor(BaseModel):
    name: str
    type: FieldKind
    value: Any = None
    options: Optional[List[str]] = None


# --- Filling ---
class FillState(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ABORTED = "Aborted"


class FieldOutcomeKind(str, Enum):
    SUCCESS = "Success"
    FIELD_NOT_FOUND = "FieldNotFound"
    OPTION_NOT_AVAILABLE = "OptionNotAvailable"
    UNSUPPORTED_FIELD_TYPE = "UnsupportedFieldType"
    FIELD_ERROR = "FieldError"


class FieldOutcome(BaseModel):
    field_name: str
    outcome: FieldOutcomeKind
    reason: Optional[str] = None


class FillResult(BaseModel):
    """Summary of one fill run. document_handle is the filled field model copy."""
    document_handle: Any = Field(default=None, exclude=True)
    state: FillState = FillState.NOT_STARTED
    success_count: int = 0
    failure_count: int = 0
    outcomes: List[FieldOutcome] = Field(default_factory=list)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count


# --- Preview / stats / validation ---
class PreviewItem(BaseModel):
    fieldName: str
    fieldType: FieldKind
    value: Any = None
    display: str = ""
    filled: bool = False


class FillingStats(BaseModel):
    totalFields: int
    filledFields: int
    emptyFields: int
    fillPercentage: str


class ValidationReport(BaseModel):
    isValid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class FieldAnalysis(BaseModel):
    totalFields: int
    fieldTypes: Dict[str, int] = Field(default_factory=dict)
    mappedFields: int = 0
    unmappedFields: int = 0
    issues: List[str] = Field(default_factory=list)
    fieldNames: List[str] = Field(default_factory=list)
    mappings: Dict[str, str] = Field(default_factory=dict)


# --- API payloads ---
class IntakeTextIn(BaseModel):
    text: str


class DocumentOut(BaseModel):
    document_id: str
    source: str
    has_document: bool
    field_count: int
    fields: List[FieldDescriptor]
    mappings: Dict[str, str]
    form_data: FormData = Field(default_factory=dict)


class IntakeOut(BaseModel):
    extracted: ExtractedRecord
    mapped: FormData
    form_data: FormData
    preview: List[PreviewItem]
    stats: FillingStats
    validation: ValidationReport


class FillOut(BaseModel):
    state: FillState
    success_count: int
    failure_count: int
    outcomes: List[FieldOutcome]
