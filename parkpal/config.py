import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name, "").strip()
    return v or default


class Settings(BaseModel):
    # Static fixture used when no live store is configured.
    inventory_path: str = _env(
        "PARKPAL_INVENTORY_PATH", os.path.join(_PACKAGE_DIR, "data", "spaces.json")
    )

    # Hosted table store (PostgREST-style API)
    supabase_url: str | None = _env("SUPABASE_URL") or _env("NEXT_PUBLIC_SUPABASE_URL")
    supabase_key: str | None = (
        _env("SUPABASE_KEY")
        or _env("SUPABASE_SERVICE_ROLE_KEY")
        or _env("SUPABASE_ANON_KEY")
    )
    supabase_spaces_table: str = _env("SUPABASE_SPACES_TABLE", "spaces")
    inventory_timeout_s: float = float(_env("INVENTORY_TIMEOUT_S", "15"))

    # LLM completion endpoint (OpenAI-compatible)
    openrouter_api_key: str | None = _env("OPENROUTER_API_KEY")
    openrouter_base_url: str = _env("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").rstrip("/")
    openrouter_model: str = _env("OPENROUTER_MODEL", "deepseek/deepseek-r1-0528-qwen3-8b:free")
    llm_timeout_s: float = float(_env("LLM_TIMEOUT_S", "60"))
    llm_retries: int = int(_env("LLM_RETRIES", "1"))
    llm_retry_backoff_s: float = float(_env("LLM_RETRY_BACKOFF_S", "1.0"))

    max_results: int = int(_env("PARKPAL_MAX_RESULTS", "3"))


settings = Settings()
