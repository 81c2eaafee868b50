from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import os
import logging

from morningproof.config.settings import get_settings
from morningproof.routers import app_locking, auth, custom_habits, routine, streaks, verification
from morningproof.tasks.scheduler import setup_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="MorningProof API",
    description="API for the MorningProof morning routine tracker",
    version="1.0.0"
)

# Photo verification payloads are large, responses compress well
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(verification.router, prefix="/api/verification", tags=["verification"])
app.include_router(routine.router, prefix="/api/routine", tags=["routine"])
app.include_router(custom_habits.router, prefix="/api/custom-habits", tags=["custom-habits"])
app.include_router(streaks.router, prefix="/api/streaks", tags=["streaks"])
app.include_router(app_locking.router, prefix="/api/app-locking", tags=["app-locking"])


@app.on_event("startup")
async def startup_event():
    settings = get_settings()
    if not settings.run_scheduler:
        logger.info("Scheduler disabled by configuration")
        return

    # Only start scheduler if we're NOT running as a web dyno
    # The worker dyno will handle all scheduled tasks
    dyno_type = os.getenv("DYNO", "").startswith("web")
    is_web_dyno = dyno_type or os.getenv("WEB_CONCURRENCY") is not None

    if not is_web_dyno:
        scheduler = setup_scheduler(development_mode=settings.debug)
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info("Scheduler started (non-web environment)")
    else:
        logger.info("Web dyno started - scheduler runs in worker dyno")


@app.on_event("shutdown")
async def shutdown_event():
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


@app.get("/")
async def root():
    return {"message": "MorningProof API is running"}


@app.get("/health")
async def health():
    return {"status": "ok", "environment": get_settings().app_env}
