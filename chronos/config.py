"""Runtime configuration read from the environment (and an optional .env file)."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_PRODUCT_TABLE = "product_c"
DEFAULT_CART_TABLE = "cart_c"
DEFAULT_CART_KEY = "chronos-cart"


@dataclass(frozen=True)
class Settings:
    """Connection and naming settings for the storefront core."""
    supabase_url: str = ""
    supabase_key: str = ""
    redis_url: str = ""
    redis_token: str = ""
    product_table: str = DEFAULT_PRODUCT_TABLE
    cart_table: str = DEFAULT_CART_TABLE
    cart_key: str = DEFAULT_CART_KEY
    otlp_endpoint: str = ""
    otlp_headers: str = ""
    environment: str = "development"

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Settings":
        """
        Build settings from environment variables.

        A .env file (``env_file`` or ``./.env``) is loaded first; variables
        already present in the environment win.
        """
        load_dotenv(env_file or Path.cwd() / ".env", override=False)

        return cls(
            supabase_url=os.environ.get("SUPABASE_URL", ""),
            supabase_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            product_table=os.environ.get("CHRONOS_PRODUCT_TABLE", DEFAULT_PRODUCT_TABLE),
            cart_table=os.environ.get("CHRONOS_CART_TABLE", DEFAULT_CART_TABLE),
            cart_key=os.environ.get("CHRONOS_CART_KEY", DEFAULT_CART_KEY),
            otlp_endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
            otlp_headers=os.environ.get("OTEL_EXPORTER_OTLP_HEADERS", ""),
            environment=os.environ.get("CHRONOS_ENV", "development"),
        )

    @property
    def tracing_enabled(self) -> bool:
        return bool(self.otlp_endpoint)
