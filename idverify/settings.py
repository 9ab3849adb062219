import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_ENV: str = os.getenv("APP_ENV", "development").lower()
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))

    # Comma-separated list; the browser form is served by this process, so this
    # only matters for external front-ends calling the JSON service.
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Blanket request throttling (fixed window, per client address)
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_BACKEND: str = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()  # memory | redis
    RATE_LIMIT_WINDOW_SEC: int = int(os.getenv("RATE_LIMIT_WINDOW_SEC", "900"))
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    # Separate budget for live input sync (/flow/field, /flow/state), one call per keystroke
    RATE_LIMIT_LIVE_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_LIVE_MAX_REQUESTS", "2000"))
    RATE_LIMIT_MESSAGE: str = os.getenv(
        "RATE_LIMIT_MESSAGE", "Too many requests from this IP, please try again later."
    )
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))

    # Demo verification values. Placeholders until a real provider is wired in.
    DEMO_OTP: str = os.getenv("DEMO_OTP", "123456")
    OTP_RESEND_SECONDS: int = int(os.getenv("OTP_RESEND_SECONDS", "30"))
    TAX_VERIFY_DELAY_SEC: float = float(os.getenv("TAX_VERIFY_DELAY_SEC", "1.0"))

    # Which provider the form flow talks to:
    # - "local": simulate verification in-process (demo values above)
    # - "http": call a service exposing /api/generate-otp, /api/verify-otp, /api/verify-tax-id
    VERIFICATION_BACKEND: str = os.getenv("VERIFICATION_BACKEND", "local").lower()
    VERIFICATION_API_URL: str = os.getenv("VERIFICATION_API_URL", "http://localhost:5000")
    VERIFICATION_TIMEOUT_SEC: float = float(os.getenv("VERIFICATION_TIMEOUT_SEC", "5"))

    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "idv_session")
    SESSION_IDLE_TTL_SEC: int = int(os.getenv("SESSION_IDLE_TTL_SEC", "1800"))

    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"

settings = Settings()
