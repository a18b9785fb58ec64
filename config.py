
import logging
import os
from datetime import timedelta
from dotenv import load_dotenv

# Load .env file
load_dotenv()

_REQUIRED = object()


def get_env_var(name, default=_REQUIRED):
    value = os.getenv(name)
    if not value:
        if default is _REQUIRED:
            raise RuntimeError(f"{name} is not set in the environment")
        return default
    return value


def get_bool(name, default="false"):
    return str(get_env_var(name, default)).lower() == "true"


# === Local Development Settings ===
FLASK_ENV = get_env_var("FLASK_ENV", "development")
PORT = int(get_env_var("PORT", "3000"))
DEBUG_MODE = get_bool("DEBUG_MODE")

# === Database ===
DATABASE_URL = get_env_var("DATABASE_URL", "sqlite:///travelsphere.db")

# === Sessions ===
SECRET_KEY = get_env_var("SECRET_KEY", "travelsphere-secret-key-change-in-production")
SESSION_LIFETIME_HOURS = int(get_env_var("SESSION_LIFETIME_HOURS", "24"))
SESSION_COOKIE_SECURE = get_bool("SESSION_COOKIE_SECURE")

# === Seed accounts for `flask seed` ===
ADMIN_NAME = get_env_var("ADMIN_NAME", "Admin User")
ADMIN_EMAIL = get_env_var("ADMIN_EMAIL", "admin@travelsphere.com")
ADMIN_PASSWORD = get_env_var("ADMIN_PASSWORD", None)
STUDENT_NAME = get_env_var("STUDENT_NAME", "Student User")
STUDENT_EMAIL = get_env_var("STUDENT_EMAIL", "student@travelsphere.com")
STUDENT_PASSWORD = get_env_var("STUDENT_PASSWORD", None)


def flask_settings():
    """Settings mapping handed to ``app.config`` by the app factory."""
    return {
        "ENV": FLASK_ENV,
        "DEBUG": FLASK_ENV == "development",
        "SECRET_KEY": SECRET_KEY,
        "SQLALCHEMY_DATABASE_URI": DATABASE_URL,
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "PERMANENT_SESSION_LIFETIME": timedelta(hours=SESSION_LIFETIME_HOURS),
        "SESSION_COOKIE_SECURE": SESSION_COOKIE_SECURE,
        "SESSION_COOKIE_HTTPONLY": True,
    }


# === Logging Configuration ===
def setup_logging():
    """Configure logging for the application"""
    log_level = logging.DEBUG if DEBUG_MODE else logging.INFO

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.StreamHandler(),
            # logging.FileHandler('app.log')  # Optional file logging
        ]
    )


def get_logger(name):
    """Get a logger instance for a specific module"""
    return logging.getLogger(name)


# Initialize logging when config is imported
setup_logging()
