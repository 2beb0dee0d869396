"""Tests for configuration loading and validation."""

from dataclasses import FrozenInstanceError, replace

import pytest

from receptionist.config import (
    AgencyConfig,
    AppConfig,
    ModelConfig,
    _safe_float,
    _safe_int,
    _validate_config,
    settings,
)


def with_model(**changes) -> AppConfig:
    return AppConfig(model=replace(ModelConfig(), **changes))


def with_agency(**changes) -> AppConfig:
    return AppConfig(agency=replace(AgencyConfig(), **changes))


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        _validate_config(AppConfig())  # should not raise

    def test_invalid_temperature_too_high(self):
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(with_model(llm_temperature=3.0))

    def test_invalid_temperature_negative(self):
        with pytest.raises(ValueError, match="LLM_TEMPERATURE"):
            _validate_config(with_model(llm_temperature=-0.5))

    def test_invalid_tts_speed(self):
        with pytest.raises(ValueError, match="TTS_SPEED"):
            _validate_config(with_model(tts_speed=4.0))

    def test_open_after_close(self):
        with pytest.raises(ValueError, match="OFFICE_OPEN_HOUR"):
            _validate_config(with_agency(open_hour=18, close_hour=9))

    def test_close_hour_past_midnight(self):
        with pytest.raises(ValueError, match="OFFICE_OPEN_HOUR"):
            _validate_config(with_agency(close_hour=25))

    def test_unknown_timezone(self):
        with pytest.raises(ValueError, match="OFFICE_TIMEZONE"):
            _validate_config(with_agency(timezone="Mars/Olympus_Mons"))

    def test_unknown_noise_cancellation_mode(self):
        with pytest.raises(ValueError, match="NOISE_CANCELLATION"):
            _validate_config(with_model(noise_cancellation="krisp"))

    @pytest.mark.parametrize("mode", ["bvc", "telephony", "off"])
    def test_noise_cancellation_modes(self, mode):
        _validate_config(with_model(noise_cancellation=mode))  # should not raise


class TestEnvParsing:
    def test_safe_int(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "42")
        assert _safe_int("TEST_INT", "0") == 42

    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("TEST_INT", raising=False)
        assert _safe_int("TEST_INT", "7") == 7

    def test_safe_int_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_INT", "nine")
        with pytest.raises(ValueError, match="Invalid integer for TEST_INT"):
            _safe_int("TEST_INT", "0")

    def test_safe_float_invalid(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT", "warm")
        with pytest.raises(ValueError, match="Invalid float for TEST_FLOAT"):
            _safe_float("TEST_FLOAT", "0.4")


class TestSettings:
    def test_settings_singleton(self):
        assert isinstance(settings, AppConfig)
        assert settings.agency.receptionist_name
        assert settings.agency.open_hour < settings.agency.close_hour

    def test_configs_are_frozen(self):
        with pytest.raises(FrozenInstanceError):
            settings.agency.name = "Other Agency"
