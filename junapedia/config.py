"""
Runtime configuration.

Values come from the environment (a local ``.env`` is loaded first) so the
batch commands and the UI share the same Supabase and OpenAI settings.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DATA_DIR = Path(__file__).parent / "data"
FRANCHISE_NAMES_PATH = DATA_DIR / "franchise_names.json"
WEBSITE_MAP_PATH = DATA_DIR / "website_map.json"

# Default-value policy for incomplete merchant rows
DEFAULT_NAME = "Sin nombre"
DEFAULT_CATEGORY = "Restaurante"

DEFAULT_TABLE = "pluxee_stores"
DEFAULT_BATCH_SIZE = 300
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_OPENAI_CALL_LIMIT = 200

# Artifacts exchanged between batch stages
RAW_STORES_FILE = "raw-stores.json"
MERGED_STORES_FILE = "unified-stores-merged.json"
DEDUPED_STORES_FILE = "unified-stores-deduped.json"
DESCRIPTIONS_FILE = "generated-descriptions.json"
COMUNAS_FILE = "known-comunas.json"


class Settings(BaseModel):
    """Environment-backed settings for the remote store and the optional LLM."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    table: str = DEFAULT_TABLE
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_call_limit: int = Field(default=DEFAULT_OPENAI_CALL_LIMIT, ge=0)
    confirm: bool = False

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            supabase_url=os.getenv("SUPABASE_URL"),
            # Service role for batch writes; the anon key is enough for the read-only UI
            supabase_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY"),
            table=os.getenv("SUPABASE_TABLE", DEFAULT_TABLE),
            batch_size=int(os.getenv("UPSERT_BATCH_SIZE", str(DEFAULT_BATCH_SIZE))),
            openai_api_key=os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
            openai_call_limit=int(os.getenv("OPENAI_CALL_LIMIT", str(DEFAULT_OPENAI_CALL_LIMIT))),
            confirm=os.getenv("CONFIRM") == "1",
        )
