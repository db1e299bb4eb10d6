"""Centralized application settings loaded from environment variables.

All configuration is defined once here. Other modules should import
``get_settings()`` rather than calling ``os.getenv()`` directly.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide configuration backed by environment variables.

    Field names are **lowercased** versions of the env-var names.
    ``pydantic-settings`` maps them automatically (case-insensitive).

    Example::

        settings = Settings()  # reads .env + real env
        bridge = settings.bridge_default_url
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -- LLM provider ------------------------------------------------------

    azure_ai_project_endpoint: str = ""
    """Foundry project endpoint URL. Ignored when ``openai_api_key`` is set."""

    azure_ai_model_deployment_name: str = "gpt-4o"
    """Default model deployment shared by both agents unless overridden."""

    azure_ai_planner_model: str | None = None
    """Model override for the query planner. Falls back to default."""

    azure_ai_synthesizer_model: str | None = None
    """Model override for the insight synthesizer. Falls back to default."""

    azure_client_id: str | None = None
    """Managed-identity client ID (None → system-assigned)."""

    openai_api_key: str | None = None
    """When set, agents talk to OpenAI directly instead of Azure AI Foundry."""

    openai_model: str = "gpt-4o"
    """OpenAI model id used with ``openai_api_key``."""

    # -- Database bridge ---------------------------------------------------

    bridge_default_url: str = "http://192.168.8.28:8000"
    """Bridge base URL used until a validated endpoint has been saved."""

    bridge_config_path: str = ".ogradycore/bridge.json"
    """File holding the last-known-good bridge endpoint."""

    bridge_timeout_seconds: float = 20.0
    """Upper bound on a single ``/query`` round trip."""

    bridge_health_timeout_seconds: float = 8.0
    """Upper bound on a ``/health`` probe."""

    target_database: str = "UltiSales"
    """Database selected by the ``USE`` preamble on every statement."""

    # -- Thresholds / Tuning -----------------------------------------------

    insight_sample_size: int = 15
    """Maximum rows sent to the synthesizer per question."""

    dashboard_cooldown_seconds: float = 2.0
    """Minimum gap between two dashboard refreshes."""

    dashboard_window_days: int = 30
    """Length of the trailing revenue window."""

    dashboard_segment_keyword: str = "ENAMEL"
    """Product description keyword for the top-buyer breakdown."""

    dashboard_top_buyers: int = 5
    """Number of customers kept in the top-buyer breakdown."""

    low_stock_threshold: int = 5
    """Stocked items with ``OnHand`` at or below this count as low stock."""

    # -- Operational -------------------------------------------------------

    max_session_cache_size: int = 1000
    """Upper bound on cached session transcripts."""

    session_ttl_seconds: int = 30 * 60
    """Idle time after which a session transcript is dropped."""

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    """Origins allowed to call the API from a browser."""


def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    Uses ``lru_cache`` semantics via a module-level singleton so the
    ``.env`` file is read at most once per process.

    Returns:
        The global ``Settings`` object.
    """
    return _settings


_settings = Settings()
