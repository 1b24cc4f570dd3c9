"""Main FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import APP_NAME, CORS_ORIGINS
from api.routes_collaboration import router as collaboration_router
from api.routes_setlists import router as setlist_router
from models.store import BANDS, SETLISTS, SONGS

app = FastAPI(title=APP_NAME)

# Configure CORS for the frontend origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(setlist_router, prefix="/api")
app.include_router(collaboration_router, prefix="/api")


@app.get("/api/health")
async def healthcheck():
    """Health check endpoint with document store status."""
    return {
        "status": "ok",
        "store": {
            "setlists": len(SETLISTS),
            "bands": len(BANDS),
            "songs": len(SONGS),
        },
    }
