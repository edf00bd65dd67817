"""
Ambit Configuration
Manages environment variables and defaults for the color engine service.
"""
import os
from typing import Optional


class Config:
    """Configuration class for the Ambit color engine."""

    # Pixel buffer limits
    MAX_PIXELS: int = int(os.environ.get("AMBIT_MAX_PIXELS", str(4096 * 4096)))
    MAX_COLORS: int = int(os.environ.get("AMBIT_MAX_COLORS", "32"))

    # Extraction defaults
    DEFAULT_COLOR_COUNT: int = int(os.environ.get("AMBIT_DEFAULT_COLOR_COUNT", "5"))
    BUCKET_BITS: int = int(os.environ.get("AMBIT_BUCKET_BITS", "4"))
    EXTRACTION_WORKERS: int = int(os.environ.get("AMBIT_EXTRACTION_WORKERS", "1"))
    CLUSTER_MAX_SAMPLES: int = int(os.environ.get("AMBIT_CLUSTER_MAX_SAMPLES", "20000"))
    CLUSTER_SEED: int = int(os.environ.get("AMBIT_CLUSTER_SEED", "42"))

    # Logging
    LOG_LEVEL: str = os.environ.get("AMBIT_LOG_LEVEL", "INFO")
    LOG_SERIALIZE: bool = bool(int(os.environ.get("AMBIT_LOG_SERIALIZE", "0")))

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("AMBIT_ALLOWED_ORIGINS", "")

    # Timeouts (milliseconds)
    TIMEOUT_EXTRACTION_MS: int = int(os.environ.get("AMBIT_TIMEOUT_EXTRACTION_MS", "2000"))
    TIMEOUT_PALETTE_MS: int = int(os.environ.get("AMBIT_TIMEOUT_PALETTE_MS", "5000"))

    # Observability
    METRICS_ENABLED: bool = bool(int(os.environ.get("AMBIT_METRICS_ENABLED", "1")))
    METRICS_HISTORY: int = int(os.environ.get("AMBIT_METRICS_HISTORY", "1000"))

    # Optional API version tag reported by /healthz
    API_VERSION: Optional[str] = os.environ.get("AMBIT_API_VERSION", "1.0.0")

    @classmethod
    def validate_bucket_bits(cls, bits: int) -> bool:
        """Validate quantization depth per channel."""
        return 1 <= bits <= 8

    @classmethod
    def validate_workers(cls, workers: int) -> bool:
        """Validate extraction worker count."""
        return 1 <= workers <= 32

    @classmethod
    def validate_pixel_count(cls, width: int, height: int) -> bool:
        """Validate pixel buffer dimensions against the configured ceiling."""
        return width > 0 and height > 0 and width * height <= cls.MAX_PIXELS

    @classmethod
    def allowed_origins(cls) -> list:
        """Parsed CORS origin list; empty means allow all."""
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global config instance
config = Config()
