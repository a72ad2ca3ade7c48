"""
Tests for settings: environment loading, validation and policy mapping.
"""

import os

import pytest
from pydantic import ValidationError

from preopflow.application.services.policy import CircuitPolicy
from preopflow.core.config import (
    CORSSettings,
    CircuitSettings,
    DatabaseSettings,
    _load_env_file_if_available,
    get_settings,
    reset_settings,
)
from preopflow.domain.enums.circuit import CircuitStep


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


def test_env_file_is_found_in_parent_directories(monkeypatch, tmp_path):
    monkeypatch.delenv("DATABASE_DB_NAME", raising=False)
    (tmp_path / ".env").write_text("DATABASE_DB_NAME=from_env_file\n")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)

    _load_env_file_if_available()

    assert os.getenv("DATABASE_DB_NAME") == "from_env_file"
    monkeypatch.delenv("DATABASE_DB_NAME")


def test_already_set_env_vars_take_precedence(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_DB_NAME", "already_set")
    (tmp_path / ".env").write_text("DATABASE_DB_NAME=from_env_file\n")
    monkeypatch.chdir(tmp_path)

    _load_env_file_if_available()

    assert os.getenv("DATABASE_DB_NAME") == "already_set"


def test_no_env_files_no_crash(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    _load_env_file_if_available()


def test_settings_are_cached_until_reset(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CIRCUIT_CALL_TIMEOUT_SECONDS", "90")
    first = get_settings()
    assert first.circuit.call_timeout_seconds == 90
    assert get_settings() is first

    reset_settings()
    monkeypatch.setenv("CIRCUIT_CALL_TIMEOUT_SECONDS", "120")
    assert get_settings().circuit.call_timeout_seconds == 120


def test_mongo_backend_requires_uri(monkeypatch):
    monkeypatch.delenv("DATABASE_URI", raising=False)
    with pytest.raises(ValidationError):
        DatabaseSettings(backend="mongo")
    with pytest.raises(ValidationError):
        DatabaseSettings(backend="mongo", uri="http://localhost")
    assert DatabaseSettings(backend="MONGO", uri="mongodb://localhost:27017/?replicaSet=rs0").backend == "mongo"


def test_double_capacity_steps_from_comma_list(monkeypatch):
    monkeypatch.setenv("CIRCUIT_DOUBLE_CAPACITY_STEPS", "triagem_medica, agendamento")
    settings = CircuitSettings()
    assert settings.double_capacity_steps == ["triagem_medica", "agendamento"]

    policy = CircuitPolicy.from_settings(settings)
    assert policy.double_capacity_steps == frozenset(
        {CircuitStep.TRIAGEM_MEDICA, CircuitStep.AGENDAMENTO}
    )


def test_unknown_step_is_rejected():
    with pytest.raises(ValidationError):
        CircuitSettings(double_capacity_steps=["recepcao"])
    with pytest.raises(ValidationError):
        CircuitSettings(default_station_counts={"recepcao": 1})


def test_timeouts_must_be_positive():
    with pytest.raises(ValidationError):
        CircuitSettings(call_timeout_seconds=0)


def test_cors_lists_accept_comma_and_json_env_values(monkeypatch):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("CORS_ALLOWED_METHODS", '["GET", "POST"]')
    settings = CORSSettings()
    assert settings.allowed_origins == ["https://a.example", "https://b.example"]
    assert settings.allowed_methods == ["GET", "POST"]
