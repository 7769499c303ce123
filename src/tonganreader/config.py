"""Configuration settings for the reader."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = BASE_DIR / (".env.test" if os.getenv("ENV") == "test" else ".env")
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
BIBLES_DIR = DATA_DIR / "bibles"

SORT_MODES = ("newest", "oldest", "random")
TRANSLATOR_PROVIDERS = ("google", "microsoft", "none")


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        BIBLES_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    reference_bible: Path = Path(os.getenv("REFERENCE_BIBLE_FILE", str(BIBLES_DIR / "esv_bible.json")))
    target_bible: Path = Path(os.getenv("TARGET_BIBLE_FILE", str(BIBLES_DIR / "tongan_bible.json")))
    dictionary: Path = Path(os.getenv("DICTIONARY_FILE", str(DATA_DIR / "tongan_dictionary.tsv")))


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///tonganreader.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class AuthSettings:
    """Identity provider settings."""
    jwt_key: str = os.getenv("AUTH_JWT_KEY", "")
    jwt_algorithms: list[str] = field(default_factory=lambda: _env_list("AUTH_JWT_ALGORITHMS", "RS256"))
    jwt_issuer: Optional[str] = os.getenv("AUTH_JWT_ISSUER") or None
    sign_in_url: str = os.getenv("SIGN_IN_URL", "/sign-in")
    webhook_secret: Optional[str] = os.getenv("WEBHOOK_SECRET") or None


@dataclass
class TranslatorSettings:
    """Fallback translation settings."""
    provider: str = os.getenv("TRANSLATOR_PROVIDER", "google").lower()
    azure_key: Optional[str] = os.getenv("AZURE_TRANSLATOR_KEY") or None
    azure_region: str = os.getenv("AZURE_TRANSLATOR_REGION", "eastus")
    source: str = os.getenv("TRANSLATOR_SOURCE", "to")
    target: str = os.getenv("TRANSLATOR_TARGET", "en")


@dataclass
class WebSettings:
    """Web server settings."""
    secret_key: str = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    host: str = os.getenv("WEB_HOST", "127.0.0.1")
    port: int = int(os.getenv("WEB_PORT", "5000"))


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


@dataclass
class StudySettings:
    """Study session and dashboard settings."""
    default_sort: str = os.getenv("DEFAULT_SORT", "newest").lower()
    new_words_window_days: int = int(os.getenv("NEW_WORDS_WINDOW_DAYS", "7"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_auth_settings() -> AuthSettings:
    """Get identity provider settings."""
    return AuthSettings()


def get_translator_settings() -> TranslatorSettings:
    """Get translator settings."""
    return TranslatorSettings()


def get_web_settings() -> WebSettings:
    """Get web server settings."""
    return WebSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


def get_study_settings() -> StudySettings:
    """Get study settings."""
    return StudySettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    auth: AuthSettings = field(default_factory=get_auth_settings)
    translator: TranslatorSettings = field(default_factory=get_translator_settings)
    web: WebSettings = field(default_factory=get_web_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)
    study: StudySettings = field(default_factory=get_study_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.study.default_sort not in SORT_MODES:
            raise ValueError(f"DEFAULT_SORT must be one of {', '.join(SORT_MODES)}")

        if self.translator.provider not in TRANSLATOR_PROVIDERS:
            raise ValueError(f"TRANSLATOR_PROVIDER must be one of {', '.join(TRANSLATOR_PROVIDERS)}")

        if self.translator.provider == "microsoft" and not self.translator.azure_key:
            raise ValueError("AZURE_TRANSLATOR_KEY is required for the microsoft translator")

        if self.study.new_words_window_days < 1:
            raise ValueError("NEW_WORDS_WINDOW_DAYS must be positive")

        if self.web.port < 1 or self.monitoring.port < 1:
            raise ValueError("WEB_PORT and METRICS_PORT must be positive")

        if not self.auth.jwt_algorithms:
            raise ValueError("AUTH_JWT_ALGORITHMS must name at least one algorithm")


# Create global settings instance
settings = Settings()
settings.validate()
