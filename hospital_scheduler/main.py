from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional
import time
import logging

from .api.v1.admin import router as admin_router
from .api.v1.auth import router as auth_router
from .api.v1.doctor import router as doctor_router
from .api.v1.patient import router as patient_router
from .core.config import Settings, settings
from .core.errors import SchedulingError
from .services.system import build_system

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def create_app(
    config: Optional[Settings] = None,
    clock: Callable[[], datetime] = datetime.now
) -> FastAPI:
    """Create the API around a freshly wired hospital system."""
    config = config or settings
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load the snapshot on startup, save it on shutdown."""
        logger.info("Starting Hospital Scheduling System...")
        logger.info(f"Using data directory {config.DATA_DIR}")
        
        try:
            app.state.system.startup()
        except OSError as e:
            logger.error(f"Failed to load data: {str(e)}")
            raise
        
        logger.info("Application startup complete")
        yield
        
        logger.info("Shutting down Hospital Scheduling System...")
        try:
            app.state.system.shutdown()
        except OSError as e:
            logger.error(f"Failed to save data: {str(e)}")
            raise
    
    app = FastAPI(
        title=config.APP_NAME,
        version=config.VERSION,
        description="Hospital appointment scheduling with role-scoped sessions",
        openapi_url="/api/v1/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.system = build_system(config, clock=clock)
    
    # Middleware setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Only add TrustedHostMiddleware in production, not in testing
    if not config.TESTING:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
        )
    
    # Custom middleware for request logging and timing
    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        
        # Log request
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )
        
        return response
    
    # Exception handlers
    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.kind,
                "message": exc.message
            }
        )
    
    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": "The requested resource was not found",
                "path": str(request.url.path)
            }
        )
    
    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(f"Internal server error: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": "An unexpected error occurred"
            }
        )
    
    # Include routers
    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(patient_router, prefix="/api/v1")
    app.include_router(doctor_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")
    
    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": config.VERSION
        }
    
    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "Welcome to Hospital Scheduling System API",
            "version": config.VERSION,
            "docs": "/docs",
            "health": "/health"
        }
    
    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "hospital_scheduler.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info"
    )
