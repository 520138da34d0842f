"""Django settings for the notification hub.

All deployment-specific values are read from environment variables so the
same image runs locally, in CI and in Kubernetes. Test overrides live in
``notification_hub.settings_test``.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = _env_bool("DEBUG", False)
ALLOWED_HOSTS = [
    host.strip()
    for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_rq",
    "notifications",
]

MIDDLEWARE = [
    "notifications.middleware.RequestIDMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "notifications.middleware.SecurityContextMiddleware",
]

ROOT_URLCONF = "notification_hub.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "notification_hub.wsgi.application"
ASGI_APPLICATION = "notification_hub.asgi.application"

# Database
# Every query is bounded by a server-side statement timeout so a slow store
# surfaces as a retryable error instead of hanging the request.
DATABASE_STATEMENT_TIMEOUT_MS = int(os.getenv("DATABASE_STATEMENT_TIMEOUT_MS", "5000"))

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("POSTGRES_DB", "notification_hub"),
        "USER": os.getenv("POSTGRES_USER", "notification_hub"),
        "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
        "HOST": os.getenv("POSTGRES_HOST", "localhost"),
        "PORT": os.getenv("POSTGRES_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("POSTGRES_CONN_MAX_AGE", "60")),
        "OPTIONS": {
            "connect_timeout": int(os.getenv("POSTGRES_CONNECT_TIMEOUT", "5")),
            "options": (
                f"-c search_path={os.getenv('POSTGRES_SCHEMA', 'notification_hub')} "
                f"-c statement_timeout={DATABASE_STATEMENT_TIMEOUT_MS}"
            ),
        },
    }
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.redis.RedisCache",
        "LOCATION": (
            f"redis://{os.getenv('REDIS_HOST', 'localhost')}:"
            f"{os.getenv('REDIS_PORT', '6379')}/{os.getenv('REDIS_CACHE_DB', '1')}"
        ),
    }
}

# Background jobs
RQ_QUEUES = {
    "default": {
        "HOST": os.getenv("REDIS_HOST", "localhost"),
        "PORT": int(os.getenv("REDIS_PORT", "6379")),
        "DB": int(os.getenv("REDIS_QUEUE_DB", "0")),
        "PASSWORD": os.getenv("REDIS_PASSWORD") or None,
        "DEFAULT_TIMEOUT": 360,
    },
}

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "notifications.auth.oauth2.OAuth2Authentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "EXCEPTION_HANDLER": "notifications.exceptions.handlers.custom_exception_handler",
}

# OAuth2 / JWT validation
OAUTH2_SERVICE_ENABLED = _env_bool("OAUTH2_SERVICE_ENABLED", True)
JWT_SECRET = os.getenv("JWT_SECRET", "")

# Email delivery
EMAIL_HOST = os.getenv("EMAIL_HOST", "localhost")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")
EMAIL_USE_TLS = _env_bool("EMAIL_USE_TLS", True)
EMAIL_TIMEOUT = float(os.getenv("EMAIL_TIMEOUT", "10"))
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "notifications@example.com")

# Push delivery
PUSH_GATEWAY_URL = os.getenv("PUSH_GATEWAY_URL", "")
PUSH_GATEWAY_TIMEOUT = float(os.getenv("PUSH_GATEWAY_TIMEOUT", "5"))

# Notification behaviour
NOTIFICATION_DEFAULT_PAGE_SIZE = int(os.getenv("NOTIFICATION_DEFAULT_PAGE_SIZE", "20"))
NOTIFICATION_MAX_PAGE_SIZE = int(os.getenv("NOTIFICATION_MAX_PAGE_SIZE", "100"))
NOTIFICATION_GROUP_WINDOW_SECONDS = int(
    os.getenv("NOTIFICATION_GROUP_WINDOW_SECONDS", "86400")
)
NOTIFICATION_MAX_DELIVERY_RETRIES = int(
    os.getenv("NOTIFICATION_MAX_DELIVERY_RETRIES", "3")
)
NOTIFICATION_STORE_RETRY_ATTEMPTS = int(
    os.getenv("NOTIFICATION_STORE_RETRY_ATTEMPTS", "3")
)
NOTIFICATION_STORE_RETRY_BASE_DELAY = float(
    os.getenv("NOTIFICATION_STORE_RETRY_BASE_DELAY", "0.1")
)
NOTIFICATION_IDEMPOTENCY_TTL = int(os.getenv("NOTIFICATION_IDEMPOTENCY_TTL", "86400"))
NOTIFICATION_DIGEST_FLUSH_INTERVAL = int(
    os.getenv("NOTIFICATION_DIGEST_FLUSH_INTERVAL", "3600")
)

# Logging is configured by structlog in notifications.logging.setup_logging
LOGGING_CONFIG = None
