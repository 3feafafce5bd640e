"""Configuration management for the Pantry AI pipeline.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        # Default: gemini-2.5-flash (fast, cost-effective for short structured outputs)
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Image Detection Model: separate model for vision tasks, falls back to GEMINI_MODEL
        self.IMAGE_DETECTION_MODEL: str = os.getenv("IMAGE_DETECTION_MODEL", self.GEMINI_MODEL)
        # Temperature: 0.7 keeps recipe variants from collapsing into the same dish
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: 2048 is sufficient for a full recipe with instructions
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
        # Per-call timeout for the generative model (seconds)
        self.MODEL_TIMEOUT_SECONDS: float = float(os.getenv("MODEL_TIMEOUT_SECONDS", "60"))

        # Model client retry configuration. The pipeline itself never retries;
        # these only apply inside the Gemini client for transient errors.
        # MODEL_MAX_ATTEMPTS: total attempts per call (1 = no retry)
        self.MODEL_MAX_ATTEMPTS: int = int(os.getenv("MODEL_MAX_ATTEMPTS", "1"))
        # DELAY_BETWEEN_RETRIES: initial delay in seconds, doubled after each attempt
        self.DELAY_BETWEEN_RETRIES: int = int(os.getenv("DELAY_BETWEEN_RETRIES", "1"))

        # Maximum number of recipe variants a single request may ask for. Default: 5
        self.MAX_VARIANTS: int = int(os.getenv("MAX_VARIANTS", "5"))
        # Maximum image size (in MB) accepted for detection. Default: 10 MB
        self.MAX_IMAGE_SIZE_MB: int = int(os.getenv("MAX_IMAGE_SIZE_MB", "10"))
        # Image Compression: re-encode large JPEG/PNG uploads before sending them to the model
        self.COMPRESS_IMG: bool = _env_bool("COMPRESS_IMG", "true")
        # Image Compression Threshold: only compress images above this size (in KB)
        self.COMPRESS_IMG_THRESHOLD_KB: int = int(os.getenv("COMPRESS_IMG_THRESHOLD_KB", "300"))
        # Detected items below this confidence are dropped. Default: 0.0 (keep everything)
        self.MIN_DETECTION_CONFIDENCE: float = float(os.getenv("MIN_DETECTION_CONFIDENCE", "0.0"))
        # Expiry window used when neither the model nor the caller supplies one
        self.DEFAULT_EXPIRY_DAYS: int = int(os.getenv("DEFAULT_EXPIRY_DAYS", "7"))

    def validate(self) -> None:
        """Validate required configuration.

        Raises:
            ValueError: If required API keys are missing or invalid values provided.
        """
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}")
        if self.MAX_OUTPUT_TOKENS < 256:
            raise ValueError(f"MAX_OUTPUT_TOKENS must be at least 256, got: {self.MAX_OUTPUT_TOKENS}")
        if self.MODEL_TIMEOUT_SECONDS <= 0:
            raise ValueError(f"MODEL_TIMEOUT_SECONDS must be positive, got: {self.MODEL_TIMEOUT_SECONDS}")
        if self.MODEL_MAX_ATTEMPTS < 1:
            raise ValueError(f"MODEL_MAX_ATTEMPTS must be at least 1, got: {self.MODEL_MAX_ATTEMPTS}")
        if self.DELAY_BETWEEN_RETRIES < 0:
            raise ValueError(
                f"DELAY_BETWEEN_RETRIES must not be negative, got: {self.DELAY_BETWEEN_RETRIES}"
            )
        if self.MAX_VARIANTS < 1:
            raise ValueError(f"MAX_VARIANTS must be at least 1, got: {self.MAX_VARIANTS}")
        if not (0.0 <= self.MIN_DETECTION_CONFIDENCE <= 1.0):
            raise ValueError(
                f"MIN_DETECTION_CONFIDENCE must be between 0.0 and 1.0, got: {self.MIN_DETECTION_CONFIDENCE}"
            )
        if self.DEFAULT_EXPIRY_DAYS < 0:
            raise ValueError(f"DEFAULT_EXPIRY_DAYS must not be negative, got: {self.DEFAULT_EXPIRY_DAYS}")


# Module-level config instance. Validation is deferred to the model client so
# the pure pipeline stages can be imported and used without an API key.
config = Config()
