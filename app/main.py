from fastapi import FastAPI
import logging
from app.core.config import settings
from app.core.database import engine, Base
from app.core.error_handlers import register_error_handlers
from app.core.logging_config import setup_logging
from app.core.middleware import add_middleware
from app.auth.routes import router as auth_router
from app.employees.routes import router as employees_router

setup_logging(log_level=settings.log_level, log_file=settings.log_file)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Employee records management with admin-only authentication",
    version="1.0.0",
    debug=settings.debug
)

# Register error handlers
register_error_handlers(app)

# Add middleware
add_middleware(app)

# Include routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(employees_router, prefix=settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    """Create database tables on startup."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Error during startup: {e}")
        raise  # Re-raise to prevent app from starting with errors


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    engine.dispose()
    logger.info("Application shutting down...")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "success": True,
        "message": settings.app_name,
        "data": {
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "auth": f"{settings.api_prefix}/auth",
                "employees": f"{settings.api_prefix}/employees",
            }
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"success": True, "message": "API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
