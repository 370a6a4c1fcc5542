"""Field mapping table - maps literal form field names to semantic keys.

Exact names of the Author Services Plan form resolve first; unfamiliar forms fall
back to regex heuristics over the normalized field name.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Iterable, Iterator, Mapping, Optional

from intakefill.app.schemas.intake import FieldAnalysis, FieldDescriptor, SemanticKey

logger = logging.getLogger(__name__)

K = SemanticKey

# Literal field names of the Author Services Plan PDF
EXACT_FIELD_NAMES: dict[str, SemanticKey] = {
    "CLIENT NAME": K.CLIENT_NAME,
    "BOOK TITLE": K.BOOK_TITLE,
    "EMAIL ADDRESS": K.EMAIL,
    "PHONE NUMBER": K.PHONE,
    "Word Count": K.WORD_COUNT,
    "Nonfiction Manuscript": K.NONFICTION_MANUSCRIPT,
    "Fiction Manuscript": K.FICTION_MANUSCRIPT,
    "Proofreading ONLY Most Popular Option": K.PROOFREADING_ONLY,
    "Developmental Editing w Critique Report": K.DEVELOPMENTAL_EDITING,
    "Line Editing SubstantiveStructural and Copy Editing": K.LINE_EDITING,
    "CopyEditing Proofreading Combined": K.COPY_EDITING_PROOFREADING,
    "Proofreading": K.PROOFREADING,
    "Book Design Production": K.BOOK_DESIGN_PRODUCTION,
    "Amazon IngramSpark MOST POPULAR": K.AMAZON_INGRAMSPARK,
    "Print on Demand Publication": K.PRINT_ON_DEMAND,
    "Copyright": K.COPYRIGHT,
    "Amazon Bestseller Campaign Free eBook 1 Guaranteed": K.BESTSELLER_CAMPAIGN_FREE,
    "Amazon Bestseller Campaign Paid eBook Top 100 Guaranteed": K.BESTSELLER_CAMPAIGN_PAID,
    "Barnes Noble Bestseller Campaign Paid eBook Top 100 Guaranteed": K.BARNES_NOBLE_BESTSELLER,
    "Author Website": K.AUTHOR_WEBSITE,
    "Author Website Premium": K.AUTHOR_WEBSITE_PREMIUM,
    "Press Release on the AP Newswire": K.PRESS_RELEASE,
    "Author Wiki Page": K.AUTHOR_WIKI_PAGE,
    "Bronze one campaign": K.BRONZE_CAMPAIGN,
    "Silver four campaigns": K.SILVER_CAMPAIGN,
    "Gold six campaigns": K.GOLD_CAMPAIGN,
    "250 guaranteed book sales": K.SALES_BOOST_250,
    "500 guaranteed book sales": K.SALES_BOOST_500,
    "750 guaranteed book sales": K.SALES_BOOST_750,
    "1000 guaranteed book sales": K.SALES_BOOST_1000,
    "Audiobook Production Publication excluding narration fees": K.AUDIOBOOK_PRODUCTION,
    "Book Video Trailer Service": K.BOOK_VIDEO_TRAILER,
    "Marketing Images 20 universal use ie website social media": K.MARKETING_IMAGES,
    "Editorial Review The Book Revue": K.EDITORIAL_REVIEW,
    "Interview on American Real Talk Show after book release": K.INTERVIEW_SHOW,
    "of Interior Images": K.INTERIOR_IMAGES,
    "AIgenerated indicate scope here": K.AI_GENERATED,
    "Is there an existing Amazon listing If so note URL": K.EXISTING_AMAZON_LISTING,
}


def normalize_field_name(name: str) -> str:
    """Lowercase, strip punctuation, collapse whitespace."""
    text = re.sub(r"[^a-z0-9 ]", " ", (name or "").lower())
    return re.sub(r"\s+", " ", text).strip()


class FieldNameHeuristics:
    """
    Best-effort semantic key for field names of unfamiliar forms.
    Order matters: the first key with a matching pattern wins, so specific keys
    are listed before the general ones they overlap with.
    """

    PATTERNS: dict[SemanticKey, list[str]] = {
        K.EXISTING_AMAZON_LISTING: [r"amazon listing"],
        K.CLIENT_NAME: [r"client.*name", r"author.*name", r"^(full )?name$"],
        K.BOOK_TITLE: [r"book.*title", r"^title$", r"manuscript title"],
        K.EMAIL: [r"e ?mail"],
        K.PHONE: [r"phone", r"mobile", r"telephone", r"^tel$"],
        K.WORD_COUNT: [r"word.*count", r"^words$"],
        K.NONFICTION_MANUSCRIPT: [r"non ?fiction"],
        K.FICTION_MANUSCRIPT: [r"fiction"],
        K.PROOFREADING_ONLY: [r"proofread.*only"],
        K.COPY_EDITING_PROOFREADING: [r"copy ?edit.*proofread"],
        K.LINE_EDITING: [r"line edit"],
        K.DEVELOPMENTAL_EDITING: [r"developmental"],
        K.PROOFREADING: [r"proofread"],
        K.AUDIOBOOK_PRODUCTION: [r"audio ?book"],
        K.BOOK_DESIGN_PRODUCTION: [r"book design", r"cover design", r"interior design"],
        K.AMAZON_INGRAMSPARK: [r"ingram ?spark"],
        K.PRINT_ON_DEMAND: [r"print on demand"],
        K.COPYRIGHT: [r"copyright"],
        K.BARNES_NOBLE_BESTSELLER: [r"barnes.*bestseller"],
        K.BESTSELLER_CAMPAIGN_PAID: [r"bestseller.*paid"],
        K.BESTSELLER_CAMPAIGN_FREE: [r"bestseller.*free", r"bestseller campaign"],
        K.MARKETING_IMAGES: [r"marketing images"],
        K.AUTHOR_WEBSITE_PREMIUM: [r"website.*premium"],
        K.AUTHOR_WEBSITE: [r"website"],
        K.PRESS_RELEASE: [r"press release"],
        K.AUTHOR_WIKI_PAGE: [r"wiki"],
        K.BRONZE_CAMPAIGN: [r"bronze"],
        K.SILVER_CAMPAIGN: [r"silver"],
        K.GOLD_CAMPAIGN: [r"gold"],
        K.SALES_BOOST_1000: [r"\b1000\b.*sales"],
        K.SALES_BOOST_750: [r"\b750\b.*sales"],
        K.SALES_BOOST_500: [r"\b500\b.*sales"],
        K.SALES_BOOST_250: [r"\b250\b.*sales"],
        K.BOOK_VIDEO_TRAILER: [r"trailer"],
        K.EDITORIAL_REVIEW: [r"editorial review"],
        K.INTERVIEW_SHOW: [r"interview"],
        K.INTERIOR_IMAGES: [r"interior images"],
        K.AI_GENERATED: [r"ai ?generated"],
    }

    @classmethod
    def match(cls, name: str) -> Optional[SemanticKey]:
        text = normalize_field_name(name)
        if not text:
            return None
        for key, patterns in cls.PATTERNS.items():
            for pattern in patterns:
                if re.search(pattern, text):
                    return key
        return None


class FieldMappingTable(Mapping[str, str]):
    """Read-only semantic key -> field name table for one loaded document."""

    def __init__(self, mappings: Mapping[str, str] | None = None, sources: Mapping[str, str] | None = None):
        self._mappings = dict(mappings or {})
        self._sources = dict(sources or {})

    def __getitem__(self, key: str) -> str:
        return self._mappings[_key_str(key)]

    def __contains__(self, key: object) -> bool:
        return _key_str(key) in self._mappings

    def get(self, key, default=None):
        return self._mappings.get(_key_str(key), default)

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def __repr__(self) -> str:
        return f"FieldMappingTable({self._mappings!r})"

    def source_of(self, key) -> Optional[str]:
        """'exact' or 'heuristic' for mapped keys."""
        return self._sources.get(_key_str(key))

    def to_dict(self) -> dict[str, str]:
        return dict(self._mappings)


def _key_str(key: object) -> object:
    return key.value if isinstance(key, SemanticKey) else key


def resolve_semantic_key(name: str) -> tuple[Optional[SemanticKey], Optional[str]]:
    """Exact lookup first, then heuristics. Returns (key, source)."""
    key = EXACT_FIELD_NAMES.get(name)
    if key is not None:
        return key, "exact"
    key = FieldNameHeuristics.match(name)
    if key is not None:
        return key, "heuristic"
    return None, None


def build_field_mappings(
    fields: Iterable[FieldDescriptor],
    log: logging.Logger | None = None,
) -> FieldMappingTable:
    """
    Build the mapping table for a freshly loaded document or preset.
    Two fields resolving to the same key: the later one in document order wins.
    """
    log = log or logger
    mappings: dict[str, str] = {}
    sources: dict[str, str] = {}
    for field in fields:
        key, source = resolve_semantic_key(field.name)
        if key is None:
            continue
        if key.value in mappings and mappings[key.value] != field.name:
            log.debug(
                "Mapping conflict key=%s previous=%r replaced_by=%r",
                key.value, mappings[key.value], field.name,
            )
        mappings[key.value] = field.name
        sources[key.value] = source
    log.info(
        "Field mappings built mapped=%d exact=%d heuristic=%d",
        len(mappings),
        sum(1 for s in sources.values() if s == "exact"),
        sum(1 for s in sources.values() if s == "heuristic"),
    )
    return FieldMappingTable(mappings, sources)


def analyze_fields(fields: list[FieldDescriptor], table: FieldMappingTable) -> FieldAnalysis:
    """Diagnostic summary of a loaded document's fields and how they mapped."""
    type_counts = Counter(field.type.value for field in fields)
    name_counts = Counter(field.name for field in fields)
    issues: list[str] = []
    for field in fields:
        if not field.name.strip():
            issues.append("Field with empty name")
        elif "undefined" in field.name:
            issues.append(f"Undefined field name: {field.name}")
    for name, count in name_counts.items():
        if count > 1 and name.strip():
            issues.append(f"Duplicate field name: {name} ({count}x)")
    mapped_names = set(table.values())
    return FieldAnalysis(
        totalFields=len(fields),
        fieldTypes=dict(type_counts),
        mappedFields=len(table),
        unmappedFields=sum(1 for field in fields if field.name not in mapped_names),
        issues=issues,
        fieldNames=[field.name for field in fields],
        mappings=table.to_dict(),
    )
