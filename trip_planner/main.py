# Role: FastAPI app bootstrap. Loads environment config early, registers routers, and exposes health/docs endpoints.

from fastapi import FastAPI

import trip_planner.config
trip_planner.config.load_env()

from trip_planner.api.chat import router as chat_router
from trip_planner.api.profile import router as profile_router

app = FastAPI(title="Trip Planner API", version="0.1.0")
app.include_router(chat_router)
app.include_router(profile_router)


@app.get("/")
def root() -> dict:
    # Role: quick discoverability for clients (where are docs/health).
    return {
        "message": "Trip Planner API is running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
