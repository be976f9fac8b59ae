# backend/app/main.py
import logging

from fastapi import FastAPI

from backend.app.api.actions import router as actions_router
from backend.app.api.analyze import router as analyze_router
from inbox_actions.config.settings import load_settings

logging.basicConfig(
    level=load_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="inbox-actions API")
app.include_router(actions_router, prefix="/api")
app.include_router(analyze_router, prefix="/api")
