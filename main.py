from fastapi import FastAPI
from socratix.api.v1 import api_router
from socratix.config import settings
from socratix.utils.logger import configure_logging
import os

configure_logging()

app = FastAPI(
    title="Socratix",
    description="Socratic tutor that guides learners through a topic with questions and evaluates their understanding",
    version="1.0.0"
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "message": "Welcome to Socratix",
        "description": "Learn any topic through guided Socratic dialogue"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# Ensure logs directory exists
os.makedirs(settings.log_dir, exist_ok=True)
