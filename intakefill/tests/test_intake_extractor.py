"""Tests for free-text intake extraction"""
import pytest

from intakefill.app.schemas.intake import ExtractedRecord
from intakefill.app.services.intake_extractor import (
    determine_manuscript_type,
    extract_book_title,
    extract_budget,
    extract_client_name,
    extract_email,
    extract_genre,
    extract_phone,
    extract_services,
    extract_word_count,
    format_phone,
    parse_intake,
)

RECORD_KEYS = {
    "clientName", "bookTitle", "email", "phone", "wordCount",
    "genre", "manuscriptType", "services", "budget",
}


@pytest.mark.parametrize("text", ["", None, "nothing useful here at all"])
def test_parse_empty_input_returns_full_null_shape(text):
    """Every key present; scalars None; service lists empty."""
    record = parse_intake(text)
    data = record.model_dump()
    assert set(data) == RECORD_KEYS
    for key in RECORD_KEYS - {"services"}:
        assert data[key] is None, key
    assert data["services"] == {"editing": [], "marketing": [], "publishing": []}


def test_parse_sample_intake(sample_intake):
    record = parse_intake(sample_intake)
    assert record.clientName == "Jane Doe"
    assert record.bookTitle == "The Long Road Home"
    assert record.email == "jane.doe@example.com"
    assert record.phone == "(555) 123-4567"
    assert record.wordCount == 75000
    assert record.genre == "Literary Fiction"
    assert record.manuscriptType == "fiction"
    assert record.budget == 5000


def test_parse_is_deterministic(sample_intake):
    assert parse_intake(sample_intake) == parse_intake(sample_intake)


# --- Client name ---
def test_client_label_takes_precedence():
    assert extract_client_name("Author: John Smith\nClient: Jane Doe") == "Jane Doe"


def test_author_label():
    assert extract_client_name("Author: John Smith") == "John Smith"


def test_client_name_stays_on_one_line():
    assert extract_client_name("Client: Jane Doe\nBook Title: Echoes") == "Jane Doe"


def test_name_line_scan_fallback():
    text = "hello there\nMaria Garcia\nwants editing"
    assert extract_client_name(text) == "Maria Garcia"


def test_name_line_scan_skips_blacklisted_lines():
    assert extract_client_name("Book Services Plan") is None


# --- Book title ---
def test_book_title_strips_annotation():
    assert extract_book_title("Book Title: The Long Road Home [tentative]") == "The Long Road Home"


def test_book_title_annotation_only_falls_through():
    text = 'Book Title: [working title]\nThe book is called "Echoes"'
    assert extract_book_title(text) == "Echoes"


def test_book_title_called_quoted():
    assert extract_book_title('My novel is titled "Winter Light" and is done.') == "Winter Light"


# --- Contact ---
def test_email_first_match():
    assert extract_email("Reach me at jane.doe+books@example.co.uk today") == "jane.doe+books@example.co.uk"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Phone: 555-123-4567", "(555) 123-4567"),
        ("call (555) 123-4567", "(555) 123-4567"),
        ("Phone: +1 555 123 4567", "+1 (555) 123-4567"),
    ],
)
def test_phone_formats(text, expected):
    assert extract_phone(text) == expected


def test_format_phone_leaves_unusual_lengths():
    assert format_phone("12345") == "12345"


# --- Word count ---
def test_word_count_approximately_label():
    assert extract_word_count("Word Count: Approximately 75,000 words") == 75000


def test_word_count_trailing_words():
    assert extract_word_count("It runs about 80,000 words so far.") == 80000


def test_word_count_missing():
    assert extract_word_count("no numbers here") is None


# --- Genre / manuscript type ---
def test_genre_label():
    assert extract_genre("Genre: Literary Fiction") == "Literary Fiction"


def test_genre_keyword_fallback():
    assert extract_genre("A gripping mystery set in Maine").lower() == "mystery"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("A fantasy novel, fiction through and through", "fiction"),
        ("Part fiction, part non-fiction.", "nonfiction"),
        ("fiction and nonfiction essays", "nonfiction"),
        ("A business book for founders", "nonfiction"),
        ("A memoir of my years at sea", "nonfiction"),
        ("Poems about the ocean", None),
    ],
)
def test_manuscript_type(text, expected):
    assert determine_manuscript_type(text) == expected


# --- Services / budget ---
def test_services_grouped_and_deduplicated():
    services = extract_services(
        "I need developmental editing and proofreading, plus a press release. Proofread twice."
    )
    assert services.editing == ["developmental edit", "proofread", "editing"]
    assert services.marketing == ["press release"]
    assert services.publishing == []


def test_budget_dollar_amount():
    assert extract_budget("We have a budget of $12,500 total") == 12500


def test_budget_label():
    assert extract_budget("Budget: 3000") == 3000


def test_record_defaults():
    record = ExtractedRecord()
    assert record.services.editing == []
    assert record.clientName is None
