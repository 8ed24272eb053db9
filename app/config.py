import os

# Database Configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./watchlist.db")

# Redis Configuration
REDIS_HOSTNAME = os.getenv("REDIS_HOSTNAME", "localhost")
REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))

# Celery Configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", f"redis://{REDIS_HOSTNAME}:{REDIS_PORT}/1")

# Twilio Configuration (WhatsApp delivery of triggered alerts)
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_WHATSAPP_NUMBER = os.getenv("TWILIO_WHATSAPP_NUMBER")

# Quote Provider Configuration
FINNHUB_API_KEY = os.getenv("FINNHUB_API_KEY", "")
FINNHUB_BASE_URL = os.getenv("FINNHUB_BASE_URL", "https://finnhub.io/api/v1")
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY", "")
COINGECKO_BASE_URL = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
STOCK_PRICE_CACHE_TTL = int(os.getenv("STOCK_PRICE_CACHE_TTL", "30"))  # Redis quote cache TTL (seconds)
QUOTE_REQUEST_TIMEOUT = float(os.getenv("QUOTE_REQUEST_TIMEOUT", "15"))  # Per batch (seconds)

# Alert Configuration
ALERT_CHECK_INTERVAL = int(os.getenv("ALERT_CHECK_INTERVAL", "60"))  # Celery beat interval (seconds)
ALERT_COOLDOWN_PERIOD = int(os.getenv("ALERT_COOLDOWN_PERIOD", "900"))  # Dead bounce window (seconds)
ALERT_BATCH_SIZE = int(os.getenv("ALERT_BATCH_SIZE", "10"))
ALERT_BATCH_DELAY_MS = int(os.getenv("ALERT_BATCH_DELAY_MS", "100"))
MAX_ALERTS_PER_USER = int(os.getenv("MAX_ALERTS_PER_USER", "500"))
NOTIFICATION_RETENTION_DAYS = int(os.getenv("NOTIFICATION_RETENTION_DAYS", "30"))

# Shared secret for the external cron trigger (disabled when unset)
CRON_SECRET = os.getenv("CRON_SECRET")

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_PATH = os.getenv("LOG_PATH", "logs/app.log")
