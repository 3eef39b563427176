"""
Configuration management for the Tiered Assistant.

Handles environment variables, API keys, and routing policy.
Uses Pydantic Settings for validation and type safety.
"""

from functools import lru_cache
from typing import Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


DEFAULT_CRITIQUE_INSTRUCTIONS = (
    "You are an evaluation assistant who scores the credibility of the last "
    "assistant's response. Chitchatting always has a score of 100. If the "
    "assistant was unable to answer the user's query, then the score will be 0."
)


class Config(BaseSettings):
    """
    Application configuration with environment variable support.

    All settings can be overridden via environment variables with the
    TIERED_ASSISTANT_ prefix (e.g., TIERED_ASSISTANT_GEMINI_API_KEY).
    The model may also be selected with a bare LLM_MODEL variable.
    """

    # ==================== API Keys ====================
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key for the responders and the critic"
    )
    tavily_api_key: str = Field(
        default="",
        description="Tavily AI API key for the web search capability"
    )

    # ==================== LLM Settings ====================
    llm_model: str = Field(
        default="gemini-3-flash-preview",
        validation_alias=AliasChoices("TIERED_ASSISTANT_LLM_MODEL", "LLM_MODEL"),
        description="Model used by every agent in the workflow"
    )
    llm_temperature: float = Field(
        default=0.2,
        description="LLM temperature for responder outputs"
    )
    llm_max_tokens: int = Field(
        default=2048,
        description="Maximum tokens for LLM responses"
    )
    max_tool_iterations: int = Field(
        default=8,
        description="Maximum function-calling rounds for the complex agent"
    )

    # ==================== Routing Policy ====================
    critique_threshold: int = Field(
        default=75,
        description="Answers scoring below this are escalated to the complex agent"
    )
    critique_instructions: str = Field(
        default=DEFAULT_CRITIQUE_INSTRUCTIONS,
        description="System instruction given to the critique scorer"
    )
    max_workflow_steps: Optional[int] = Field(
        default=None,
        description="Optional safety bound on steps per workflow run"
    )

    # ==================== Capability Settings ====================
    http_timeout: float = Field(
        default=15.0,
        description="Timeout in seconds for lookup plugin HTTP calls"
    )
    wikipedia_language: str = Field(
        default="en",
        description="Wikipedia language edition used for encyclopedia search"
    )
    wikipedia_max_results: int = Field(
        default=3,
        description="Number of Wikipedia pages summarised per search"
    )
    tavily_max_results: int = Field(
        default=5,
        description="Maximum results from Tavily search"
    )

    # ==================== Console Settings ====================
    allow_empty_prompt: bool = Field(
        default=False,
        description="Accept blank console input as a prompt"
    )
    prompt_fallback: Optional[str] = Field(
        default=None,
        description="Prompt substituted for blank console input"
    )
    session_max_retries: int = Field(
        default=0,
        description="Retries of a failed workflow run for backend errors"
    )

    # ==================== System Settings ====================
    log_level: str = Field(
        default="WARNING",
        description="Logging level"
    )

    model_config = {
        "env_prefix": "TIERED_ASSISTANT_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore"
    }

    @field_validator("gemini_api_key")
    @classmethod
    def validate_required_keys(cls, v: str, info) -> str:
        """Validate that required API keys are provided."""
        if not v:
            # Allow empty for testing, but warn
            import warnings
            warnings.warn(f"{info.field_name} is not set. Agents will fail to respond.")
        return v

    @field_validator("critique_threshold")
    @classmethod
    def validate_threshold(cls, v: int) -> int:
        """Validate threshold is a valid score."""
        if not 0 <= v <= 100:
            raise ValueError("critique_threshold must be between 0 and 100")
        return v

    @field_validator("max_workflow_steps")
    @classmethod
    def validate_max_steps(cls, v: Optional[int]) -> Optional[int]:
        """Validate the step bound is positive when set."""
        if v is not None and v < 1:
            raise ValueError("max_workflow_steps must be positive")
        return v

    @field_validator("session_max_retries", "max_tool_iterations")
    @classmethod
    def validate_non_negative(cls, v: int, info) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return v


@lru_cache()
def get_settings() -> Config:
    """
    Get cached application settings.

    Returns:
        Config: Application configuration instance
    """
    return Config()


# Global settings instance
settings = get_settings()


# ==================== Model Configuration ====================

class ModelConfig:
    """Generation settings for the different workflow roles."""

    SIMPLE_AGENT = {
        "model": settings.llm_model,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "purpose": "Fast first answer without external lookups"
    }

    COMPLEX_AGENT = {
        "model": settings.llm_model,
        "temperature": settings.llm_temperature,
        "max_tokens": settings.llm_max_tokens,
        "purpose": "Escalated answer with lookup capabilities"
    }

    CRITIC = {
        "model": settings.llm_model,
        "temperature": 0.0,
        # Thinking tokens share this budget with the JSON reply
        "max_tokens": settings.llm_max_tokens,
        "purpose": "Credibility scoring of the latest answer"
    }
