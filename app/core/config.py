"""Configuration management for the Knowledge Forge service."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    # Environment variables should be set directly
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")
    SUPABASE_ANON_KEY: str | None = Field(
        default=None, description="Supabase anon key used to verify user access tokens"
    )

    # OpenAI configuration (optional: without a key every capability uses its fallback)
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")

    # Environment
    FORGE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod, test")

    # Generation configuration
    GENERATION_MODEL: str = Field(
        default="gpt-4o-mini", description="Chat model for classification, insights and answers"
    )
    GENERATION_TEMPERATURE: float = Field(default=0.2, description="Default sampling temperature")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=768, description="Embedding vector dimension")

    # Knowledge processing
    CHUNK_SIZE: int = Field(default=500, description="Characters per embedding chunk")
    SCOPE_PROMPT_CHARS: int = Field(
        default=1000, description="Characters of content shown to the scope classifier"
    )

    # Retrieval configuration
    RAG_MATCH_THRESHOLD: float = Field(default=0.4, description="Minimum cosine similarity")
    RAG_MATCH_COUNT: int = Field(default=15, description="Top-K chunks from vector search")
    RAG_MIN_VECTOR_RESULTS: int = Field(
        default=5, description="Below this many vector hits the keyword search runs"
    )
    RAG_TEXT_RESULT_LIMIT: int = Field(
        default=10, description="Combined result count the keyword search fills up to"
    )
    RAG_RECENT_LIMIT: int = Field(default=8, description="Recent entries used as last resort")
    RAG_MAX_KEYWORDS: int = Field(default=3, description="Keywords taken from the query")

    # PayPal configuration
    PAYPAL_CLIENT_ID: str | None = Field(default=None, description="PayPal REST client id")
    PAYPAL_CLIENT_SECRET: str | None = Field(default=None, description="PayPal REST secret")
    PAYPAL_WEBHOOK_ID: str | None = Field(
        default=None, description="Webhook id; enables signature verification when set"
    )
    PAYPAL_ENVIRONMENT: str = Field(default="sandbox", description="sandbox or live")
    PAYPAL_BRAND_NAME: str = Field(
        default="Knowledge Forge", description="Brand shown on the PayPal approval page"
    )
    PAYPAL_RETURN_BASE_URL: str = Field(
        default="http://localhost:5173",
        description="Fallback origin for approval return/cancel URLs",
    )

    @property
    def paypal_base_url(self) -> str:
        if self.PAYPAL_ENVIRONMENT == "live":
            return "https://api-m.paypal.com"
        return "https://api-m.sandbox.paypal.com"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
