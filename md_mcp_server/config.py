from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the md-mcp clinical workflow server.

    All values are loaded from environment variables with `MD_MCP_` prefix.
    You can also use a `.env` file in the working directory during development.
    """

    model_config = SettingsConfigDict(
        env_prefix="MD_MCP_",
        env_file=".env",
        extra="ignore",
    )

    # General
    env: str = "dev"
    server_name: str = "md-mcp-server"
    server_version: str = "1.0.0"
    log_level: str = "INFO"

    # Transport
    transport: Literal["stdio", "http"] = "stdio"
    server_port: int = 8000
    server_host: str = "0.0.0.0"
    max_sessions: int = Field(default=100, ge=1)
    cors_allow_origins: List[str] = ["*"]

    # Processing
    max_processing_time_ms: int = Field(default=5000, ge=1)


class ServerInfo(BaseModel):
    """
    Static description advertised to MCP clients on initialize.
    """

    name: str
    version: str
    instructions: str


SERVER_INSTRUCTIONS = (
    "Medical decision MCP server for structured clinical workflows. "
    "Tools cover medication reconciliation (gather_bpmh, compare_medications, "
    "resolve_discrepancy), therapeutic drug monitoring (assess_tdm_candidate, "
    "calculate_steady_state, plan_sample_collection, interpret_tdm_result, "
    "monitor_tdm_trends), drug interaction screening, SOAP documentation, "
    "five-rights medication administration and cross-protocol decision support. "
    "Outputs are illustrative workflow aids, not a source of medical truth."
)


def server_info(settings: Settings) -> ServerInfo:
    return ServerInfo(
        name=settings.server_name,
        version=settings.server_version,
        instructions=SERVER_INSTRUCTIONS,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from environment."""
    return Settings()
