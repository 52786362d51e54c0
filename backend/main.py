"""
Hotel Reporting - FastAPI Backend
"""
import logging
import sys
from contextlib import asynccontextmanager

# Configure logging to output to stdout
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database import get_db
from auth import UserResponse, get_current_user
from api import analytics, audit, config, email_reports, export, forecast, goals, reports
from services.email_service import EmailDeliveryError, EmailNotConfiguredError
from services.firebase_client import FirebaseAPIError
from scheduler import start_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()


app = FastAPI(
    title="Hotel Reporting API",
    description="Occupancy, revenue, forecast and goal analytics for the hotel back office",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FirebaseAPIError)
async def store_unavailable_handler(request: Request, exc: FirebaseAPIError):
    logger.error(f"Data store error on {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": f"Data store unavailable: {exc}"})


@app.exception_handler(EmailNotConfiguredError)
async def email_not_configured_handler(request: Request, exc: EmailNotConfiguredError):
    return JSONResponse(status_code=503, content={"detail": f"Email delivery not configured: {exc}"})


@app.exception_handler(EmailDeliveryError)
async def email_delivery_handler(request: Request, exc: EmailDeliveryError):
    return JSONResponse(status_code=502, content={"detail": f"Email delivery failed: {exc}"})


# Include routers
app.include_router(reports.router, prefix="/reports", tags=["Reports"])
app.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
app.include_router(forecast.router, prefix="/forecast", tags=["Forecasts"])
app.include_router(goals.router, prefix="/goals", tags=["Goals"])
app.include_router(email_reports.router, prefix="/email-reports", tags=["Email Reports"])
app.include_router(config.router, prefix="/config", tags=["Configuration"])
app.include_router(audit.router, prefix="/audit", tags=["Audit Log"])
app.include_router(export.router, prefix="/export", tags=["Exports"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "hotel-reporting-api"}


@app.get("/health/store")
async def store_health_check(db=Depends(get_db)):
    """Data store health check"""
    if not await db.test_connection():
        raise HTTPException(status_code=503, detail="Data store unreachable")
    return {"status": "healthy", "store": "connected"}


@app.get("/auth/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """Get current user info"""
    return current_user


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
