"""Testimony Library API: FastAPI entry point."""

from pathlib import Path

# Load .env BEFORE reading settings
from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lib.settings import get_settings
from server.routes import admin_clips, categories, clips

VERSION = "1.1.0"

app = FastAPI(title="Testimony Library API", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_origin_regex=r"https://.*\.(vercel|railway)\.app",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(clips.router)
app.include_router(categories.router)
app.include_router(admin_clips.router)


@app.get("/health")
async def health() -> dict:
    """Liveness check; does not touch storage."""
    return {
        "status": "OK",
        "message": "Testimony Library backend is running",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
