from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_name: str = "crm-config-engine"
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    database_url: str = "sqlite:///./crm_projects.db"
    redis_url: str = "redis://localhost:6379/0"

    anthropic_api_key: str | None = None
    anthropic_base_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 8000
    anthropic_temperature: float = 0.3

    generation_timeout_seconds: float = 120.0
    sample_records_per_entity: int = 8
    min_prompt_length: int = 20

settings = Settings()
