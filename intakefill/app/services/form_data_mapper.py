"""Map an ExtractedRecord onto a document's fields using its mapping table.

Pure functions: the same record, table and text always give the same FormData.
Checkbox values are only ever asserted True; nothing is unchecked here.
"""
from __future__ import annotations

import logging
from typing import Mapping

from intakefill.app.schemas.intake import ExtractedRecord, FormData, FormValue, SemanticKey
from intakefill.app.services.field_mapping import FieldMappingTable

logger = logging.getLogger(__name__)

K = SemanticKey

SCALAR_KEYS: tuple[SemanticKey, ...] = (K.CLIENT_NAME, K.BOOK_TITLE, K.EMAIL, K.PHONE)

# Checked in this order; only the first phrase present (and mapped) is selected.
EDITING_TIER_PRECEDENCE: tuple[tuple[str, SemanticKey], ...] = (
    ("line editing", K.LINE_EDITING),
    ("developmental editing", K.DEVELOPMENTAL_EDITING),
    ("copy editing", K.COPY_EDITING_PROOFREADING),
    ("proofreading", K.PROOFREADING_ONLY),
)

# Independent add-on triggers: (any of these phrase groups, all terms of a group present) -> key
KEYWORD_TRIGGERS: tuple[tuple[SemanticKey, tuple[tuple[str, ...], ...]], ...] = (
    (K.BOOK_DESIGN_PRODUCTION, (("cover design",), ("interior design",))),
    (K.AMAZON_INGRAMSPARK, (("amazon", "ingramspark"),)),
    (K.COPYRIGHT, (("copyright registration",),)),
    (K.PRINT_ON_DEMAND, (("print on demand",),)),
    (K.AUDIOBOOK_PRODUCTION, (("audiobook",),)),
    (K.BESTSELLER_CAMPAIGN_FREE, (("bestseller campaign",),)),
    (K.PRESS_RELEASE, (("press release",),)),
    (K.AUTHOR_WEBSITE, (("website",),)),
    (K.AUTHOR_WIKI_PAGE, (("wiki",),)),
    (K.BOOK_VIDEO_TRAILER, (("book trailer",), ("video trailer",))),
    (K.EDITORIAL_REVIEW, (("editorial review",),)),
)


def select_editing_tier(text: str, table: FieldMappingTable) -> SemanticKey | None:
    """First editing phrase in precedence order whose key the document maps."""
    lowered = (text or "").lower()
    for phrase, key in EDITING_TIER_PRECEDENCE:
        if phrase in lowered and key in table:
            return key
    return None


def triggered_addons(text: str) -> list[SemanticKey]:
    lowered = (text or "").lower()
    return [
        key
        for key, groups in KEYWORD_TRIGGERS
        if any(all(term in lowered for term in group) for group in groups)
    ]


def map_to_form_data(
    record: ExtractedRecord,
    table: FieldMappingTable,
    text: str = "",
    log: logging.Logger | None = None,
) -> FormData:
    """
    Build field name -> value for one extraction pass.
    An entry is produced only when the value is present AND the key is mapped.
    """
    log = log or logger
    form_data: FormData = {}

    def put(key: SemanticKey, value: FormValue) -> None:
        field_name = table.get(key)
        if field_name:
            form_data[field_name] = value

    for key in SCALAR_KEYS:
        value = getattr(record, key.value)
        if value:
            put(key, value)
    if record.wordCount:
        put(K.WORD_COUNT, str(record.wordCount))

    if record.manuscriptType == "fiction":
        put(K.FICTION_MANUSCRIPT, True)
    elif record.manuscriptType == "nonfiction":
        put(K.NONFICTION_MANUSCRIPT, True)

    tier = select_editing_tier(text, table)
    if tier is not None:
        put(tier, True)

    for key in triggered_addons(text):
        put(key, True)

    log.info("Form data mapped entries=%d mapped_keys=%d", len(form_data), len(table))
    log.debug("Form data mapping %s", form_data)
    return form_data


def merge_form_data(current: Mapping[str, FormValue], new: Mapping[str, FormValue]) -> FormData:
    """New accumulated FormData; values from `new` win on collision."""
    return {**current, **new}
