from fastapi import FastAPI

from gst_returns.api.v1 import v1_router
from gst_returns.config.settings import settings
from gst_returns.core.logging_config import setup_logging

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.get("/health")
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}


app.include_router(v1_router)
