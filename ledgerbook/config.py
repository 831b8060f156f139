from pathlib import Path
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# Load .env from repo root for local development and scripts.
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)
    db_path: str = Field(default="./data/ledger.sqlite3", alias="DB_PATH")
    # 2022..2029 is the range the month/year date mapping renders as four-digit years
    snapshot_seed_years: int = Field(default=8, ge=1, alias="SNAPSHOT_SEED_YEARS")

settings = Settings()
