"""
Pytest fixtures for IntakeFill tests.
Uses in-memory SQLite, builds fillable PDFs with reportlab, clears document sessions.
"""
import os
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Use in-memory SQLite for tests - set before config/session load
# Must override any .env DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from intakefill.app.db.base import Base
from intakefill.main import app
from intakefill.app.core.dependencies import get_db
from intakefill.app.schemas.intake import FieldDescriptor, FieldKind
from intakefill.app.services import document_store

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app uses our test engine
import intakefill.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


SAMPLE_INTAKE = """Client: Jane Doe
Book Title: The Long Road Home
Email: jane.doe@example.com
Phone: 555-123-4567
Word Count: Approximately 75,000 words
Genre: Literary Fiction
She wants line editing and proofreading, cover design, and a bestseller campaign.
Budget: $5,000
"""

# Author Services Plan subset: (name, kind)
PLAN_FIELDS = [
    ("CLIENT NAME", FieldKind.TEXT),
    ("BOOK TITLE", FieldKind.TEXT),
    ("EMAIL ADDRESS", FieldKind.TEXT),
    ("PHONE NUMBER", FieldKind.TEXT),
    ("Word Count", FieldKind.TEXT),
    ("Fiction Manuscript", FieldKind.CHECKBOX),
    ("Nonfiction Manuscript", FieldKind.CHECKBOX),
    ("Proofreading ONLY Most Popular Option", FieldKind.CHECKBOX),
    ("Developmental Editing w Critique Report", FieldKind.CHECKBOX),
    ("Line Editing SubstantiveStructural and Copy Editing", FieldKind.CHECKBOX),
    ("CopyEditing Proofreading Combined", FieldKind.CHECKBOX),
    ("Book Design Production", FieldKind.CHECKBOX),
    ("Amazon Bestseller Campaign Free eBook 1 Guaranteed", FieldKind.CHECKBOX),
    ("Author Website", FieldKind.CHECKBOX),
]


def build_plan_descriptors(extra: list[FieldDescriptor] | None = None) -> list[FieldDescriptor]:
    fields = [
        FieldDescriptor(name=name, type=kind, value=False if kind == FieldKind.CHECKBOX else "")
        for name, kind in PLAN_FIELDS
    ]
    return fields + list(extra or [])


def build_fillable_pdf(
    text_fields: list[str] = (),
    checkboxes: list[str] = (),
    choices: dict[str, list[str]] | None = None,
) -> bytes:
    """One-page AcroForm PDF with the given text fields, checkboxes and dropdowns."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    form = c.acroForm
    y = 740
    for name in text_fields:
        c.drawString(40, y + 4, name)
        form.textfield(name=name, x=300, y=y, width=250, height=18, value="")
        y -= 28
    for name in checkboxes:
        c.drawString(40, y + 4, name)
        form.checkbox(name=name, x=300, y=y, size=14, checked=False, buttonStyle="check")
        y -= 28
    for name, options in (choices or {}).items():
        c.drawString(40, y + 4, name)
        form.choice(name=name, x=300, y=y, width=200, height=18, options=options, value=options[0])
        y -= 28
    c.showPage()
    c.save()
    return buffer.getvalue()


@pytest.fixture
def plan_pdf_bytes() -> bytes:
    return build_fillable_pdf(
        text_fields=[name for name, kind in PLAN_FIELDS if kind == FieldKind.TEXT],
        checkboxes=[name for name, kind in PLAN_FIELDS if kind == FieldKind.CHECKBOX],
        choices={"Genre Choice": ["Fiction", "Memoir", "Business"]},
    )


@pytest.fixture
def plan_descriptors() -> list[FieldDescriptor]:
    return build_plan_descriptors()


@pytest.fixture
def pdf_builder():
    return build_fillable_pdf


@pytest.fixture
def sample_intake() -> str:
    return SAMPLE_INTAKE


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient with a fresh DB."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_document_sessions():
    document_store.clear()
    yield
    document_store.clear()
