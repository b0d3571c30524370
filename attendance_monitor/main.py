import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from attendance_monitor import config
from attendance_monitor.api.v1.attendance import router
from attendance_monitor.api.v1.monitor import monitor_router
from attendance_monitor.api.v1.students import str_router
from attendance_monitor.database import database
from attendance_monitor.exceptions import AttendanceError, PersistenceError, DataUnavailableError

# Configure logging with UTF-8 encoding
logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(config.LOG_FILE, encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    try:
        if await database.connect():
            await database.create_tables()
            logger.info("Database connected and tables created")
        else:
            logger.warning("Database is not connected, requests needing it will fail")
    except Exception as e:
        logger.error(f"Error during startup: {e}", exc_info=True)

    logger.info("Application startup complete")
    yield

    logger.info("Shutting down application...")
    try:
        await database.disconnect()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Department Attendance Monitor API",
    description="API for recording lecture attendance and monitoring student attendance",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(router)
app.include_router(monitor_router)
app.include_router(str_router)


@app.get("/")
async def root():
    return {
        "message": "Welcome to Department Attendance Monitor API",
        "version": "1.0.0",
        "endpoints": {
            "attendance": "/attendance",
            "attendance_monitor": "/attendance-monitor",
            "filter_options": "/attendance-monitor/filters",
            "students": "/students",
            "health": "/health"
        }
    }


@app.get("/health")
async def health_check():
    db_status = await database.check_connection()
    return {
        "status": "healthy" if db_status else "degraded",
        "database": "connected" if db_status else "disconnected"
    }


# Error handlers
@app.exception_handler(AttendanceError)
async def attendance_error_handler(request: Request, exc: AttendanceError):
    if isinstance(exc, (PersistenceError, DataUnavailableError)):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.client_message()})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()))
        message = f"Invalid request: {location} {errors[0].get('msg', '')}".strip()
    logger.warning(f"{request.method} {request.url.path} validation failed: {errors}")
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


if __name__ == "__main__":
    uvicorn.run("attendance_monitor.main:app", host=config.APP_HOST, port=config.APP_PORT, reload=True)
