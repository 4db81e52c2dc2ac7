# backend/app/main.py
import logging

from fastapi import FastAPI

from backend.app.api.reports import router as reports_router
from backend.app.api.run import router as run_router
from backend.app.api.secrets import router as secrets_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="morning-secretary API")
app.include_router(run_router, prefix="/api")
app.include_router(secrets_router, prefix="/api")
app.include_router(reports_router, prefix="/api")


@app.get("/api/health", include_in_schema=False)
def health() -> dict:
    return {"ok": True}
