"""
Dependency injection utilities
"""
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from intakefill.app.db.session import SessionLocal
from intakefill.app.services.document_store import DocumentSession, get_session


def get_db() -> Session:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_document_session(document_id: str) -> DocumentSession:
    """Resolve the {document_id} path parameter to a live document session"""
    session = get_session(document_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document session not found or expired",
        )
    return session
