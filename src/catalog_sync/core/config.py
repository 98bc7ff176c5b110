# src/catalog_sync/core/config.py
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_SEED_PATH = Path(__file__).resolve().parent.parent / "data" / "seed_breweries.json"


class Settings(BaseSettings):
    # App
    app_name: str = "BriefBeer Catalog Sync"
    app_version: str = "1.0.0"
    debug: bool = False

    # Welcher Katalog synchronisiert wird
    catalog_kind: Literal["breweries", "champions"] = "breweries"

    # Persistence
    database_url: str = "sqlite+aiosqlite:///catalog.db"

    # External APIs
    open_brewery_db_base_url: str = "https://api.openbrewerydb.org/v1"
    data_dragon_base_url: str = "https://ddragon.leagueoflegends.com/cdn/12.6.1/data/en_US"
    data_dragon_image_base_url: str = (
        "https://ddragon.leagueoflegends.com/cdn/12.6.1/img/champion"
    )
    open_food_facts_base_url: str = "https://world.openfoodfacts.org"
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    page_size: int = Field(default=50, ge=1, le=200)

    # Seed-Daten (mit der App ausgeliefert)
    seed_dataset_path: Path = _DEFAULT_SEED_PATH
    seed_country: str = "Czech Republic"

    # Namespace für vom User angelegte Datensätze
    user_id_prefix: str = Field(default="user_", min_length=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
