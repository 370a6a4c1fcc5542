"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intakefill.app.api.v1.forms.routes import router as forms_router
from intakefill.app.api.v1.intake.routes import router as intake_router
from intakefill.app.api.v1.presets.routes import router as presets_router
from intakefill.app.core.config import settings
from intakefill.app.core.logging_config import setup_logging
from intakefill.app.db.base import Base
from intakefill.app.db.session import engine

# Import models so they register with Base.metadata
import intakefill.app.models  # noqa: F401

logger = setup_logging()

# Create database tables
try:
    Base.metadata.create_all(bind=engine)
except Exception as e:
    logger.error("Database error: %s", e)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Client intake extraction and Author Services Plan form filling",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(forms_router, prefix="/api/forms", tags=["forms"])
app.include_router(intake_router, prefix="/api/intake", tags=["intake"])
app.include_router(presets_router, prefix="/api/presets", tags=["presets"])


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": f"{settings.app_name} API", "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


def main() -> None:
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
