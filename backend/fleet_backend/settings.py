import os
import sys
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url
from datetime import timedelta
from django.utils.crypto import salted_hmac

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.environ.get("SECRET_KEY", os.environ.get("DJANGO_SECRET_KEY", "changeme"))


def derived_secret(purpose):
    """Per-purpose signing key derived from SECRET_KEY."""
    return salted_hmac(f"fleet_backend.{purpose}", "signing-key", secret=SECRET_KEY, algorithm="sha256").hexdigest()


DEBUG = os.getenv("DEBUG", os.getenv("DJANGO_DEBUG", "True")) == "True"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost,testserver").split(",")

TESTING = (
    "PYTEST_CURRENT_TEST" in os.environ
    or "pytest" in sys.argv[0]
    or "test" in sys.argv
)

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "corsheaders",
    "rest_framework",
    "ops.apps.OpsConfig",  # Operations & observability
    "ranks.apps.RanksConfig",  # Rank hierarchy + route manifests (no models)
    "accounts.apps.AccountsConfig",
    "identity.apps.IdentityConfig",
    "credentials.apps.CredentialsConfig",
    "vanish.apps.VanishConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "ops.metrics.track_request_metrics",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "credentials.middleware.EntryGateMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "fleet_backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

WSGI_APPLICATION = "fleet_backend.wsgi.application"
ASGI_APPLICATION = "fleet_backend.asgi.application"

# =============================================================================
# Database Configuration
# =============================================================================
DATABASES = {
    "default": dj_database_url.config(
        env="DATABASE_URL",
        default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}",
        conn_max_age=600,
    )
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_USER_MODEL = "accounts.User"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "credentials.authentication.SessionCredentialAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.UserRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/hour",
        "user": "1000/hour",
        "session_handoff": "20/minute",
    },
}

if TESTING:
    REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"]["session_handoff"] = None

CORS_ALLOWED_ORIGINS = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000"
).split(",")

CORS_ALLOW_CREDENTIALS = True

CSRF_TRUSTED_ORIGINS = os.getenv(
    "CSRF_TRUSTED_ORIGINS",
    "http://localhost:3000"
).split(",")

# =============================================================================
# Session Credential (signed cookie cache of rank + profile)
# =============================================================================
SESSION_CREDENTIAL_COOKIE = os.getenv("SESSION_COOKIE_NAME", "fleet_session")
SESSION_CREDENTIAL_SECRET = os.getenv("SESSION_SECRET") or derived_secret("session-credential")
SESSION_CREDENTIAL_ALGORITHM = "HS256"
SESSION_CREDENTIAL_LIFETIME = timedelta(days=int(os.getenv("SESSION_LIFETIME_DAYS", "30")))
# Client script reads cached profile fields for instant hydration.
SESSION_CREDENTIAL_HTTPONLY = False
SESSION_CREDENTIAL_SECURE = not DEBUG

# =============================================================================
# Entry Gate
# =============================================================================
# RANK_GATE_ENFORCE=1 redirects denied routes to the rank home (hard mode).
# Anything else only logs the denial (soft mode).
RANK_GATE_ENFORCEMENT = "hard" if os.getenv("RANK_GATE_ENFORCE", "0") == "1" else "soft"
ENABLE_ADMIN_REALM = os.getenv("ENABLE_ADMIN_REALM", "False") == "True"
SIGN_IN_URL = "/sign-in"

# =============================================================================
# External Identity Provider
# =============================================================================
IDENTITY_PROVIDER = os.getenv("IDENTITY_PROVIDER", "identity.providers.SignedAssertionProvider")
IDENTITY_PROVIDER_TAG = os.getenv("IDENTITY_PROVIDER_TAG", "external")
IDENTITY_ASSERTION_SECRET = os.getenv("IDENTITY_ASSERTION_SECRET") or derived_secret("identity-assertion")
IDENTITY_ASSERTION_AUDIENCE = os.getenv("IDENTITY_ASSERTION_AUDIENCE", "fleet")
IDENTITY_ASSERTION_ISSUER = os.getenv("IDENTITY_ASSERTION_ISSUER") or None
IDENTITY_ASSERTION_HEADER = "HTTP_X_IDENTITY_ASSERTION"
IDENTITY_ASSERTION_COOKIE = "__session"
IDENTITY_TICKET_LIFETIME = timedelta(minutes=int(os.getenv("IDENTITY_TICKET_MINUTES", "15")))
# Provider cookies wiped by /api/session/invalidate.
IDENTITY_PROVIDER_COOKIES = ("__session", "__client_db_jwt")

# =============================================================================
# Manifest validation
# =============================================================================
FRONTEND_VIEWS_DIR = os.getenv("FRONTEND_VIEWS_DIR", "")

# =============================================================================
# Structured Logging Configuration
# =============================================================================
from ops.logging_config import get_logging_config
LOGGING = get_logging_config(DEBUG)

# =============================================================================
# Observability Configuration
# =============================================================================
# Application version (set via CI/CD)
VERSION = os.getenv("APP_VERSION", "dev")
