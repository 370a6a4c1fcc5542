"""Tests for the field name -> semantic key mapping table"""
from intakefill.app.schemas.intake import FieldDescriptor, FieldKind, SemanticKey
from intakefill.app.services.field_mapping import (
    EXACT_FIELD_NAMES,
    FieldNameHeuristics,
    analyze_fields,
    build_field_mappings,
    normalize_field_name,
    resolve_semantic_key,
)


def _text(name):
    return FieldDescriptor(name=name, type=FieldKind.TEXT, value="")


def _box(name):
    return FieldDescriptor(name=name, type=FieldKind.CHECKBOX, value=False)


def test_exact_names_cover_every_semantic_key():
    assert set(EXACT_FIELD_NAMES.values()) == set(SemanticKey)


def test_plan_fields_map_exactly(plan_descriptors):
    table = build_field_mappings(plan_descriptors)
    assert table[SemanticKey.CLIENT_NAME] == "CLIENT NAME"
    assert table["email"] == "EMAIL ADDRESS"
    assert table.get(SemanticKey.LINE_EDITING) == "Line Editing SubstantiveStructural and Copy Editing"
    assert table.source_of(SemanticKey.CLIENT_NAME) == "exact"
    assert len(table) == len(plan_descriptors)


def test_unmapped_keys_are_absent(plan_descriptors):
    table = build_field_mappings(plan_descriptors)
    assert SemanticKey.AUDIOBOOK_PRODUCTION not in table
    assert table.get(SemanticKey.AUDIOBOOK_PRODUCTION) is None


def test_heuristic_fallback_for_unfamiliar_names():
    table = build_field_mappings([_text("Author Full Name"), _text("E-mail"), _box("Non-Fiction")])
    assert table[SemanticKey.CLIENT_NAME] == "Author Full Name"
    assert table[SemanticKey.EMAIL] == "E-mail"
    assert table[SemanticKey.NONFICTION_MANUSCRIPT] == "Non-Fiction"
    assert SemanticKey.FICTION_MANUSCRIPT not in table
    assert table.source_of(SemanticKey.EMAIL) == "heuristic"


def test_unknown_field_names_are_ignored():
    table = build_field_mappings([_text("Signature Date"), _text("")])
    assert len(table) == 0


def test_later_field_wins_on_conflict():
    table = build_field_mappings([_text("Email"), _text("E-mail Address")])
    assert table[SemanticKey.EMAIL] == "E-mail Address"


def test_exact_lookup_beats_heuristics():
    key, source = resolve_semantic_key("Proofreading ONLY Most Popular Option")
    assert key == SemanticKey.PROOFREADING_ONLY
    assert source == "exact"


def test_heuristic_order_prefers_specific_keys():
    assert FieldNameHeuristics.match("Author Website Premium") == SemanticKey.AUTHOR_WEBSITE_PREMIUM
    assert FieldNameHeuristics.match("Website") == SemanticKey.AUTHOR_WEBSITE
    assert FieldNameHeuristics.match("Proofreading only") == SemanticKey.PROOFREADING_ONLY
    assert FieldNameHeuristics.match("Proofreading") == SemanticKey.PROOFREADING


def test_normalize_field_name():
    assert normalize_field_name("  E-Mail   ADDRESS: ") == "e mail address"
    assert normalize_field_name(None) == ""


def test_analyze_fields_reports_issues(plan_descriptors):
    fields = plan_descriptors + [_text("undefined_1"), _text("Notes"), _text("Notes")]
    table = build_field_mappings(fields)
    analysis = analyze_fields(fields, table)
    assert analysis.totalFields == len(fields)
    assert analysis.fieldTypes["CheckBox"] == 9
    assert analysis.mappedFields == len(plan_descriptors)
    assert analysis.unmappedFields == 3
    assert "Undefined field name: undefined_1" in analysis.issues
    assert "Duplicate field name: Notes (2x)" in analysis.issues
    assert analysis.mappings["clientName"] == "CLIENT NAME"
