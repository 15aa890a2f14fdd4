from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from evofinz.models.constants import CURRENCIES, DEFAULT_CURRENCY


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG, DATA_DIR, DB_FILENAME, HST_RATE).
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # Basic app metadata
    app_name: str = "EvoFinz"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "evofinz.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided

    # Locale / tax defaults
    default_currency: str = DEFAULT_CURRENCY  # applied when a new expense omits currency
    default_language: str = "en"
    country: str = "CA"
    hst_rate: float = 0.13  # Ontario HST used for the T2125 ITC estimate

    # Report branding
    business_name: Optional[str] = None
    user_name: Optional[str] = None
    export_draft: bool = False

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        # Ensure persistence directory exists
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        if self.default_language not in {"es", "en"}:
            raise ValueError(
                f"Unsupported default_language '{self.default_language}'. Allowed: es, en"
            )
        self.default_currency = self.default_currency.upper().strip()
        if self.default_currency not in CURRENCIES:
            raise ValueError(
                f"Unsupported default_currency '{self.default_currency}'. Allowed: {', '.join(sorted(CURRENCIES))}"
            )
        if not (0 <= self.hst_rate < 1):
            raise ValueError("hst_rate must be within [0, 1)")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
