import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from keihi.config import settings
from keihi.routers import extract

API_VERSION = "0.1.0"

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Keihi API",
    description="Receipt OCR text to expense form fields",
    version=API_VERSION,
)

# The expense form is served from a separate origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(extract.router)


@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "version": API_VERSION, "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
