from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from pubqa.utils.errors import ConfigurationError

root_dir = Path(__file__).parent.parent.parent.parent
env_path = root_dir / ".env"

load_dotenv(dotenv_path=env_path, override=False)


def str_to_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "t", "y")


def str_to_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class AppConfig:
    """General application configuration."""
    app_env: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class GeminiConfig:
    """Gemini REST API configuration (embedding + generation)."""
    api_key: Optional[str] = os.getenv("GEMINI_API_KEY") or None
    base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    embedding_model: str = os.getenv("GEMINI_EMBEDDING_MODEL", "text-embedding-004")
    generation_model: str = os.getenv("GEMINI_GENERATION_MODEL", "gemini-2.0-flash")
    timeout_s: int = int(os.getenv("GEMINI_TIMEOUT_S", "60"))
    embedding_max_input_chars: int = int(os.getenv("EMBEDDING_MAX_INPUT_CHARS", "20000"))


@dataclass
class SupabaseConfig:
    """Supabase (PostgREST) vector store configuration."""
    url: Optional[str] = os.getenv("SUPABASE_URL") or None
    service_role_key: Optional[str] = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None
    match_function: str = os.getenv("SUPABASE_MATCH_FUNCTION", "match_articles")
    timeout_s: int = int(os.getenv("SUPABASE_TIMEOUT_S", "30"))


@dataclass
class RetrievalConfig:
    """Primary / backfill retrieval profiles."""
    primary_threshold: float = float(os.getenv("RETRIEVAL_PRIMARY_THRESHOLD", "0.4"))
    primary_limit: int = int(os.getenv("RETRIEVAL_PRIMARY_LIMIT", "7"))
    backfill_threshold: float = float(os.getenv("RETRIEVAL_BACKFILL_THRESHOLD", "0.35"))
    backfill_base_limit: int = int(os.getenv("RETRIEVAL_BACKFILL_BASE_LIMIT", "15"))
    fallback_top_n: int = int(os.getenv("RETRIEVAL_FALLBACK_TOP_N", "3"))


@dataclass
class RelevanceConfig:
    """LLM relevance re-ranking configuration."""
    cutoff: int = int(os.getenv("RELEVANCE_CUTOFF", "5"))
    excerpt_chars: int = int(os.getenv("RELEVANCE_EXCERPT_CHARS", "300"))
    temperature: float = float(os.getenv("RELEVANCE_TEMPERATURE", "0.2"))
    max_tokens: int = int(os.getenv("RELEVANCE_MAX_TOKENS", "1000"))


@dataclass
class GenerationConfig:
    """Answer generation configuration."""
    temperature: float = float(os.getenv("GENERATION_TEMPERATURE", "0.3"))
    max_tokens: int = int(os.getenv("GENERATION_MAX_TOKENS", "2000"))
    max_attempts: int = int(os.getenv("GENERATION_MAX_ATTEMPTS", "3"))
    backoff_base: float = float(os.getenv("GENERATION_BACKOFF_BASE", "2.0"))


@dataclass
class QuestionConfig:
    """Incoming question validation."""
    max_length: int = int(os.getenv("QUESTION_MAX_LENGTH", "1000"))


@dataclass
class APIConfig:
    """API server configuration."""
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))
    reload: bool = str_to_bool(os.getenv("API_RELOAD", "false"))
    cors_origins: List[str] = field(default_factory=lambda: str_to_list(os.getenv("API_CORS_ORIGINS", "*")))


@dataclass
class Settings:
    """Main settings object containing all configuration sections."""
    app: AppConfig
    gemini: GeminiConfig
    supabase: SupabaseConfig
    retrieval: RetrievalConfig
    relevance: RelevanceConfig
    generation: GenerationConfig
    question: QuestionConfig
    api: APIConfig

    @classmethod
    def load(cls) -> Settings:
        """Load settings from environment variables."""
        return cls(
            app=AppConfig(),
            gemini=GeminiConfig(),
            supabase=SupabaseConfig(),
            retrieval=RetrievalConfig(),
            relevance=RelevanceConfig(),
            generation=GenerationConfig(),
            question=QuestionConfig(),
            api=APIConfig(),
        )

    def missing_credentials(self) -> List[str]:
        """Names of required environment variables that are not set."""
        required = {
            "GEMINI_API_KEY": self.gemini.api_key,
            "SUPABASE_URL": self.supabase.url,
            "SUPABASE_SERVICE_ROLE_KEY": self.supabase.service_role_key,
        }
        return [name for name, value in required.items() if not value]

    def require(self, *names: str) -> None:
        """Raise ConfigurationError if any of the given credentials is missing."""
        missing = [name for name in self.missing_credentials() if not names or name in names]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


settings = Settings.load()


if __name__ == "__main__":
    print("=== Settings Debug ===")
    print(f"Root dir: {root_dir}")
    print(f".env path: {env_path}")
    print(f".env exists: {env_path.exists()}")
    print(f"\nGemini generation model: {settings.gemini.generation_model}")
    print(f"Gemini embedding model: {settings.gemini.embedding_model}")
    print(f"Supabase match function: {settings.supabase.match_function}")
    print(f"Missing credentials: {settings.missing_credentials() or 'none'}")
