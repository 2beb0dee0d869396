"""
Centralized configuration with environment variable overrides.

Agency details, office hours, and voice pipeline model settings live here.
The customer directory integration keeps its own per-instance settings in
``receptionist.directory.config`` so a client can be built with overrides.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

NOISE_CANCELLATION_MODES = frozenset({"bvc", "telephony", "off"})


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class AgencyConfig:
    """Agency details used in prompts and caller-facing messages."""

    name: str = os.getenv("AGENCY_NAME", "Chrysalis Insurance Agency")
    receptionist_name: str = os.getenv("RECEPTIONIST_NAME", "Iris")
    phone: str = os.getenv("AGENCY_PHONE", "(714) 464-8080")
    email: str = os.getenv("AGENCY_EMAIL", "Service@ciapro.net")
    website: str = os.getenv("AGENCY_WEBSITE", "www.ciapro.net")
    service_states: str = os.getenv("AGENCY_SERVICE_STATES", "California and Idaho")
    timezone: str = os.getenv("OFFICE_TIMEZONE", "America/Los_Angeles")
    open_hour: int = _safe_int("OFFICE_OPEN_HOUR", "9")
    close_hour: int = _safe_int("OFFICE_CLOSE_HOUR", "17")


@dataclass(frozen=True)
class ModelConfig:
    """LLM and voice pipeline model settings."""

    llm_model: str = os.getenv("LLM_MODEL", "gpt-4.1-mini")
    llm_temperature: float = _safe_float("LLM_TEMPERATURE", "0.4")
    stt_model: str = os.getenv("STT_MODEL", "nova-3")
    stt_language: str = os.getenv("STT_LANGUAGE", "en")
    tts_model: str = os.getenv("TTS_MODEL", "sonic-3")
    tts_voice_id: str = os.getenv("TTS_VOICE_ID", "9626c31c-bec5-4cca-baa8-f8ba9e84c8bc")
    tts_speed: float = _safe_float("TTS_SPEED", "0.95")
    preemptive_generation: bool = os.getenv("PREEMPTIVE_GENERATION", "true").lower() == "true"
    # "bvc", "telephony" or "off" (self-hosted servers without LiveKit Cloud).
    noise_cancellation: str = os.getenv("NOISE_CANCELLATION", "bvc").lower()


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    agency: AgencyConfig = field(default_factory=AgencyConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_name: str = os.getenv("AGENT_NAME", "iris-receptionist")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.llm_temperature <= 2.0:
        raise ValueError(
            f"LLM_TEMPERATURE must be between 0.0 and 2.0, got {config.model.llm_temperature}"
        )
    if not 0.5 <= config.model.tts_speed <= 2.0:
        raise ValueError(
            f"TTS_SPEED must be between 0.5 and 2.0, got {config.model.tts_speed}"
        )

    if config.model.noise_cancellation not in NOISE_CANCELLATION_MODES:
        raise ValueError(
            f"NOISE_CANCELLATION must be one of {sorted(NOISE_CANCELLATION_MODES)}, "
            f"got {config.model.noise_cancellation!r}"
        )

    agency = config.agency
    if not 0 <= agency.open_hour < agency.close_hour <= 24:
        raise ValueError(
            "OFFICE_OPEN_HOUR must be before OFFICE_CLOSE_HOUR within 0-24, "
            f"got {agency.open_hour}-{agency.close_hour}"
        )
    try:
        ZoneInfo(agency.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"OFFICE_TIMEZONE is not a known time zone: {agency.timezone!r}") from None


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.agency.name)
    return config


# Singleton instance
settings = load_config()
