from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from eventreg.api.v1 import auth, user, event, admin
from eventreg.core import cache
from eventreg.core.config import settings
from eventreg.core.database import engine, Base
from eventreg.core.exceptions import AppError, ValidationError
import logging
import time
from fastapi.middleware.cors import CORSMiddleware


# Configure logging
logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Event Registration API", version="1.0.0")

# Include routers
app.include_router(auth.router, prefix="/api/v1", tags=["authentication"])
app.include_router(user.router, prefix="/api/v1", tags=["user"])
app.include_router(event.router, prefix="/api/v1", tags=["event"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_url or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"status": "error", "code": error.code, "message": error.message},
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = ValidationError.message
    return error_response(ValidationError(message))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(AppError())


@app.on_event("startup")
async def startup_event():
    # Wait for database to be ready and create tables
    max_retries = 30
    retry_count = 0

    while retry_count < max_retries:
        try:
            # Try to create tables
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created successfully")
            break
        except Exception as e:
            retry_count += 1
            logger.warning(
                f"Database connection attempt {retry_count} failed: {str(e)}"
            )
            if retry_count >= max_retries:
                logger.error("Max retries reached. Could not connect to database.")
                raise e
            time.sleep(2)


@app.get("/")
def read_root():
    return {"message": "Event Registration API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    try:
        # Check database connection
        from sqlalchemy import text

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected",
            "cache": "connected" if cache.ping() else "unavailable",
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Database unhealthy")
