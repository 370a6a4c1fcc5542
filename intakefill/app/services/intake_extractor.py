"""
Client intake extraction - parses free-text intake notes into an ExtractedRecord.

Each field has an ordered list of strategies (text -> value | None); the first
strategy returning a value wins and later strategies are not consulted.
Nothing here raises on unmatched input: missing fields stay None.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from intakefill.app.schemas.intake import ExtractedRecord, ServiceMentions

logger = logging.getLogger(__name__)

Strategy = Callable[[str], Optional[Any]]

# Two or more capitalized words on one line
_NAME = r"([A-Z][a-zA-Z'\-]+(?:[ \t]+[A-Z][a-zA-Z'\-]+)+)"
_NUMBER = r"(\d[\d,]*)"

_NAME_LINE_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2}$")
_NAME_LINE_BLACKLIST = ("client:", "services", "book", "email", "phone")

_EMAIL_RE = re.compile(r"[\w.+-]+@[\w.-]+\.\w{2,}")
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")

_QUOTES = "\"'“”‘’"

GENRE_KEYWORDS = (
    "science fiction", "sci-fi", "non-fiction", "nonfiction", "self-help", "fiction",
    "business", "memoir", "romance", "mystery", "thriller", "fantasy", "biography",
    "history", "cooking", "health", "fitness",
)
NONFICTION_INDICATORS = ("nonfiction", "non-fiction", "business", "memoir", "self-help", "biography")

SERVICE_PATTERNS: dict[str, list[str]] = {
    "editing": [r"(?:developmental|dev)\s*edit", r"line\s*edit", r"copy\s*edit", r"proofread", r"editing"],
    "marketing": [r"bestseller", r"campaign", r"website", r"press\s*release", r"marketing", r"promotion"],
    "publishing": [r"publish", r"print", r"ebook", r"audiobook", r"hardcover"],
}


# --- Strategy helpers ---
def _to_int(raw: str) -> Optional[int]:
    digits = raw.replace(",", "").strip()
    try:
        return int(digits)
    except ValueError:
        return None


def _regex(pattern: str, flags: int = 0, clean: Callable[[str], Optional[Any]] = str.strip) -> Strategy:
    """Strategy returning clean(group 1) of the first match."""
    compiled = re.compile(pattern, flags)

    def strategy(text: str) -> Optional[Any]:
        match = compiled.search(text)
        if not match:
            return None
        return clean(match.group(1))

    return strategy


def first_match(strategies: list[Strategy], text: str) -> Optional[Any]:
    for strategy in strategies:
        value = strategy(text)
        if value is not None and value != "":
            return value
    return None


def _name_line_scan(text: str) -> Optional[str]:
    for line in text.split("\n"):
        trimmed = line.strip()
        lowered = trimmed.lower()
        if any(token in lowered for token in _NAME_LINE_BLACKLIST):
            continue
        if _NAME_LINE_RE.match(trimmed):
            return " ".join(trimmed.split())
    return None


def _strip_annotations(raw: str) -> Optional[str]:
    cleaned = re.sub(r"\[[^\]]*\]", "", raw)
    cleaned = cleaned.replace("[", "").replace("]", "").strip()
    return cleaned or None


def _strip_quotes(raw: str) -> Optional[str]:
    return raw.strip().strip(_QUOTES).strip() or None


def format_phone(raw: str) -> str:
    """(NNN) NNN-NNNN for 10 digits, +1 (NNN) NNN-NNNN for 1 + 10 digits, else raw."""
    digits = re.sub(r"\D", "", raw)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits[0] == "1":
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return raw


CLIENT_NAME_STRATEGIES: list[Strategy] = [
    _regex(r"(?i:client)\s*:\s*" + _NAME),
    _regex(r"\b(?i:author|name)\s*:\s*" + _NAME),
    _regex(r"\b(?:[Bb]y|[Ff]rom)[ \t]+" + _NAME),
    _name_line_scan,
]

BOOK_TITLE_STRATEGIES: list[Strategy] = [
    _regex(r"book title\s*:\s*([^\n\r]+)", re.IGNORECASE, _strip_annotations),
    _regex(r"\b(?i:book title|title|book)\s*:\s*([" + _QUOTES + r"]?[A-Z][^,\n\r]+)", clean=_strip_quotes),
    _regex(r"\b(?i:called|titled)\s*[" + _QUOTES + r"]([^" + _QUOTES + r"\n\r]+)[" + _QUOTES + r"]", clean=_strip_quotes),
]

WORD_COUNT_STRATEGIES: list[Strategy] = [
    _regex(r"word count\s*:\s*(?:approximately\s*)?" + _NUMBER, re.IGNORECASE, _to_int),
    _regex(r"\bwords?\s*:\s*" + _NUMBER, re.IGNORECASE, _to_int),
    _regex(_NUMBER + r"\s*words?\b", re.IGNORECASE, _to_int),
]

GENRE_STRATEGIES: list[Strategy] = [
    _regex(
        r"\b(?i:genre|type|category)\s*:\s*"
        r"([A-Z][a-zA-Z\-]+(?:[ \t]*/[ \t]*[A-Z][a-zA-Z\-]+|[ \t]+[A-Z][a-zA-Z\-]+)*)"
    ),
    _regex(r"\b(" + "|".join(re.escape(k) for k in GENRE_KEYWORDS) + r")\b", re.IGNORECASE),
]

BUDGET_STRATEGIES: list[Strategy] = [
    _regex(r"budget\s*:\s*\$?\s*" + _NUMBER, re.IGNORECASE, _to_int),
    _regex(r"\$\s*" + _NUMBER, clean=_to_int),
    _regex(_NUMBER + r"\s*dollars?\b", re.IGNORECASE, _to_int),
]


# --- Field extractors ---
def extract_client_name(text: str) -> Optional[str]:
    return first_match(CLIENT_NAME_STRATEGIES, text)


def extract_book_title(text: str) -> Optional[str]:
    return first_match(BOOK_TITLE_STRATEGIES, text)


def extract_email(text: str) -> Optional[str]:
    """Extract first email from text."""
    match = _EMAIL_RE.search(text)
    return match.group(0) if match else None


def extract_phone(text: str) -> Optional[str]:
    """Extract first phone number from text, canonically formatted."""
    match = _PHONE_RE.search(text)
    return format_phone(match.group(0).strip()) if match else None


def extract_word_count(text: str) -> Optional[int]:
    return first_match(WORD_COUNT_STRATEGIES, text)


def extract_genre(text: str) -> Optional[str]:
    return first_match(GENRE_STRATEGIES, text)


def determine_manuscript_type(text: str) -> Optional[str]:
    """'fiction' only when no nonfiction spelling appears; nonfiction indicators win otherwise."""
    lowered = text.lower()
    if "fiction" in lowered and "nonfiction" not in lowered and "non-fiction" not in lowered:
        return "fiction"
    if any(indicator in lowered for indicator in NONFICTION_INDICATORS):
        return "nonfiction"
    return None


def extract_services(text: str) -> ServiceMentions:
    """All service keyword mentions per category, lowercased and de-duplicated."""
    found: dict[str, list[str]] = {}
    for category, patterns in SERVICE_PATTERNS.items():
        seen: dict[str, None] = {}
        for pattern in patterns:
            for match in re.finditer(pattern, text, re.IGNORECASE):
                seen.setdefault(" ".join(match.group(0).lower().split()), None)
        found[category] = list(seen)
    return ServiceMentions(**found)


def extract_budget(text: str) -> Optional[int]:
    return first_match(BUDGET_STRATEGIES, text)


def parse_intake(text: str | None, log: logging.Logger | None = None) -> ExtractedRecord:
    """Parse raw intake notes. Never raises; unmatched fields are None."""
    log = log or logger
    text = "" if text is None else str(text)
    record = ExtractedRecord(
        clientName=extract_client_name(text),
        bookTitle=extract_book_title(text),
        email=extract_email(text),
        phone=extract_phone(text),
        wordCount=extract_word_count(text),
        genre=extract_genre(text),
        manuscriptType=determine_manuscript_type(text),
        services=extract_services(text),
        budget=extract_budget(text),
    )
    found = [name for name, value in record.model_dump(exclude={"services"}).items() if value is not None]
    log.debug("Intake parsed text_len=%d found=%s", len(text), found)
    log.info(
        "Intake extraction completed fields_found=%d editing=%d marketing=%d publishing=%d",
        len(found),
        len(record.services.editing),
        len(record.services.marketing),
        len(record.services.publishing),
    )
    return record
