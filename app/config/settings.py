from typing import Optional
from urllib.parse import quote_plus

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database configuration for the conversation message log"""

    host: str = "localhost"
    port: int = 5432
    username: str = "postgres"
    password: SecretStr = Field(default=SecretStr("postgres"))
    database: str = "swift_voice"
    schema_name: Optional[str] = None
    create_tables: bool = True
    serverless: bool = Field(
        default=True,
        description="If true, disable connection pooling so serverless DBs can pause.",
    )

    @property
    def url(self) -> str:
        """Get database URL"""
        username = quote_plus(self.username)
        password = quote_plus(self.password.get_secret_value())
        return (
            "postgresql+asyncpg://"
            f"{username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
    )


class GroqConfig(BaseSettings):
    """Speech-to-text configuration (OpenAI-compatible Whisper endpoint)."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.groq.com/openai/v1"
    transcription_model: str = "whisper-large-v3"
    timeout_seconds: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="GROQ_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class BedrockConfig(BaseSettings):
    """Amazon Bedrock configuration."""

    region: str = Field(
        default="us-east-1",
        validation_alias="BEDROCK_REGION",
    )
    model_id: str = Field(
        default="meta.llama3-8b-instruct-v1:0",
        validation_alias="BEDROCK_MODEL_ID",
    )
    model_description: str = Field(
        default="Llama 3, created by Meta, the 8 billion parameter version. "
        "It is hosted on Amazon Bedrock",
        validation_alias="BEDROCK_MODEL_DESCRIPTION",
    )
    max_tokens: int = Field(
        default=512,
        validation_alias="BEDROCK_MAX_TOKENS",
        ge=1,
        le=4096,
    )
    temperature: float = Field(
        default=0.5,
        validation_alias="BEDROCK_TEMPERATURE",
        ge=0.0,
        le=1.0,
    )
    top_p: float = Field(
        default=0.9,
        validation_alias="BEDROCK_TOP_P",
        ge=0.0,
        le=1.0,
    )
    access_key: Optional[str] = Field(
        default=None,
        validation_alias="AWS_ACCESS_KEY_ID",
    )
    secret_key: SecretStr | None = Field(
        default=None,
        validation_alias="AWS_SECRET_ACCESS_KEY",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        secrets_dir=".secrets",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )


class CartesiaConfig(BaseSettings):
    """Cartesia streaming text-to-speech configuration."""

    api_key: SecretStr | None = None
    base_url: str = "https://api.cartesia.ai"
    api_version: str = "2024-06-30"
    model_id: str = "sonic-english"
    voice_id: str = "79a125e8-cd45-4c13-8a67-188112f4dd22"
    container: str = "raw"
    encoding: str = "pcm_f32le"
    sample_rate: int = 24000
    timeout_seconds: float = Field(default=30.0, gt=0)
    model_description: str = (
        "Sonic, created and hosted by Cartesia, a company that builds fast "
        "and realistic speech synthesis technology"
    )

    model_config = SettingsConfigDict(
        env_prefix="CARTESIA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )


class IdentityConfig(BaseSettings):
    """Bearer token verification for the identity provider (Supabase JWTs)."""

    jwt_secret: SecretStr | None = Field(
        default=None,
        validation_alias="SUPABASE_JWT_SECRET",
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias="SUPABASE_JWT_ALGORITHM")
    jwt_audience: Optional[str] = Field(
        default="authenticated",
        validation_alias="SUPABASE_JWT_AUDIENCE",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class VoiceConfig(BaseSettings):
    """Request metadata and persona settings for the voice pipeline."""

    assistant_name: str = "Swift"
    platform_description: str = "You are built with FastAPI and served by uvicorn."
    request_id_header: str = "x-vercel-id"
    country_header: str = "x-vercel-ip-country"
    region_header: str = "x-vercel-ip-country-region"
    city_header: str = "x-vercel-ip-city"
    timezone_header: str = "x-vercel-ip-timezone"
    default_timezone: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="VOICE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


class Settings(BaseSettings):
    """Application settings"""

    app_name: str = "Swift Voice Backend"
    app_version: str = "1.0.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_file: str = "logs/app.log"
    pipeline_log_file: str = "logs/voice_pipeline.log"
    transcript_log_file: str = "logs/transcripts.log"

    # Database
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    # Speech-to-text
    groq: GroqConfig = Field(default_factory=GroqConfig)

    # Bedrock
    bedrock: BedrockConfig = Field(default_factory=BedrockConfig)

    # Text-to-speech
    cartesia: CartesiaConfig = Field(default_factory=CartesiaConfig)

    # Identity
    identity: IdentityConfig = Field(default_factory=IdentityConfig)

    # Voice pipeline
    voice: VoiceConfig = Field(default_factory=VoiceConfig)

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]
    cors_expose_headers: list[str] = ["X-Transcript", "X-Response"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
