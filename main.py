"""
Ambit color engine service entry point.
"""
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before config is read
load_dotenv()

from ambit.api.v1 import router as v1_router  # noqa: E402
from ambit.config import config  # noqa: E402
from ambit.utils.logging import get_logger  # noqa: E402

logger = get_logger()

if not config.validate_bucket_bits(config.BUCKET_BITS):
    raise ValueError(f"AMBIT_BUCKET_BITS must be between 1 and 8, got {config.BUCKET_BITS}")
if not config.validate_workers(config.EXTRACTION_WORKERS):
    raise ValueError(f"AMBIT_EXTRACTION_WORKERS must be between 1 and 32, got {config.EXTRACTION_WORKERS}")

app = FastAPI(
    title="Ambit Color Engine",
    description="Color extraction, harmony, palette analysis and optimization",
    version=config.API_VERSION or "1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins() or ["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(v1_router)

logger.info("Ambit color engine configured", extra={
    "log_level": config.LOG_LEVEL,
    "extraction_timeout_ms": config.TIMEOUT_EXTRACTION_MS,
    "extraction_workers": config.EXTRACTION_WORKERS,
})


@app.get("/")
async def root():
    return {"service": "ambit-color-engine", "docs": "/docs", "health": "/v1/healthz"}
