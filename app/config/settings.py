from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Used by background workers and the n8n callback

    # n8n workflow automation
    n8n_webhook_url: Optional[str] = None
    n8n_api_key: Optional[str] = None
    n8n_timeout_seconds: float = 10.0
    n8n_callback_secret: Optional[str] = None  # Expected in X-Callback-Secret on status callbacks

    # WordPress
    wordpress_request_timeout_seconds: float = 10.0

    # PHP lint (php -l) for user supplied code
    php_binary: str = "php"
    php_lint_on_save: bool = True

    # Deployments
    pending_deployments_batch_size: int = 10

    # App
    app_name: str = "wp-theme-builder"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
