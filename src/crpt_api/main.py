from fastapi import FastAPI

from crpt_api.api.documents import router as documents_router
from crpt_api.api.health import router as health_router
from crpt_api.core.logging import configure_logging

configure_logging()

app = FastAPI(
    title="CRPT Document Service",
    version="0.1.0",
    description="Throttled document submission to the CRPT (Chestny ZNAK) API.",
)
app.include_router(health_router)
app.include_router(documents_router)
