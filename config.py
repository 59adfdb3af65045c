"""Configuration via pydantic-settings. Reads from .env or environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ===== JIRA (TL;DR sync on approval) =====
    jira_base_url: str = ""
    jira_api_token: str = ""
    jira_email: str = ""  # Atlassian Cloud uses email + token; empty means bearer auth
    jira_tldr_field_id: str = "customfield_10087"

    # ===== SLACK (publish announcements) =====
    slack_webhook_url: str = ""

    # ===== PUBLIC CHANGELOG =====
    public_base_url: str = "http://localhost:8001"
    feed_title: str = "Product Changelog"
    feed_description: str = "Latest product updates and improvements"

    # ===== PAGINATION =====
    default_page_limit: int = 50
    public_page_limit: int = 20
    max_page_limit: int = 200

    # ===== SYSTEM =====
    database_url: str = "sqlite+aiosqlite:///./changelog.db"
    log_level: str = "INFO"
    port: int = 8001

    # ===== DEMO/PRODUCTION MODE =====
    demo_mode: bool = True
    seed_on_startup: bool = True  # Auto-seed demo entries when app starts (only if demo_mode=true)


settings = Settings()
