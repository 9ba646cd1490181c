"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pathlib import Path
from dotenv import load_dotenv
from starlette.middleware.base import BaseHTTPMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import render, sessions
from services.image_io import register_heif_opener
from settings import settings

# Register HEIF/HEIC opener at startup (for iPhone photos)
heif_available = register_heif_opener()


class PrivateNetworkAccessMiddleware(BaseHTTPMiddleware):
    """Middleware to handle Private Network Access preflight requests."""

    async def dispatch(self, request: Request, call_next):
        # Handle preflight for Private Network Access
        if request.method == "OPTIONS":
            response = Response(status_code=204)
            response.headers["Access-Control-Allow-Origin"] = "*"
            response.headers["Access-Control-Allow-Methods"] = "*"
            response.headers["Access-Control-Allow-Headers"] = "*"
            response.headers["Access-Control-Allow-Private-Network"] = "true"
            return response

        response = await call_next(request)
        response.headers["Access-Control-Allow-Private-Network"] = "true"
        return response


# Create app
app = FastAPI(
    title="Subtitle Band API",
    description="API for stacking subtitle bands beneath an image",
    version="0.1.0",
)

# Private Network Access middleware (must be before CORS)
app.add_middleware(PrivateNetworkAccessMiddleware)

# CORS middleware for the editor frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Canvas-Width", "X-Canvas-Height"],
)

# Saved exports are served from the media root
media_path = Path(settings.SUBTITLE_MEDIA_ROOT)
media_path.mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

# Include routers
app.include_router(render.router, prefix="/render", tags=["render"])
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Subtitle Band API", "heif": heif_available}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
