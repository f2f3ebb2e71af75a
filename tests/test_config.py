import dataclasses

import pytest

from purger.config import (
    PurgeConfig,
    PurgeConfigError,
    config_from_mapping,
    load_config,
    load_settings,
    validate_config,
)
from purger.units import TimeUnit


def test_defaults():
    config = PurgeConfig()
    assert config.enabled is False
    assert config.execute_on_startup is False
    assert config.execution_interval == 24
    assert config.execution_interval_unit is TimeUnit.HOURS
    assert config.max_history == 30
    assert config.max_history_unit is TimeUnit.DAYS
    assert validate_config(config) is config


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        PurgeConfig().max_history = 1


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"execution_interval": 0}, "'executionInterval' must be greater than 0"),
        ({"execution_interval": -3}, "'executionInterval' must be greater than 0"),
        ({"max_history": 0}, "'maxHistory' must be greater than 0"),
        (
            {"execution_interval_unit": TimeUnit.MILLISECONDS},
            "'executionIntervalUnit' must be one of the following units: SECONDS, MINUTES, HOURS, DAYS",
        ),
        (
            {"max_history_unit": TimeUnit.NANOSECONDS},
            "'maxHistoryUnit' must be one of the following units: SECONDS, MINUTES, HOURS, DAYS",
        ),
    ],
)
def test_validation_errors(overrides, message):
    with pytest.raises(PurgeConfigError) as exc:
        validate_config(PurgeConfig(**overrides))
    assert str(exc.value) == message


def test_validation_checks_interval_first():
    config = PurgeConfig(execution_interval=0, max_history=0)
    with pytest.raises(PurgeConfigError, match="executionInterval"):
        validate_config(config)


def test_config_error_is_value_error():
    assert issubclass(PurgeConfigError, ValueError)


def test_mapping_accepts_any_key_spelling():
    config = config_from_mapping(
        {
            "enabled": True,
            "executeOnStartup": "true",
            "execution-interval": "2",
            "execution_interval_unit": "seconds",
            "maxHistory": 5,
            "MAX_HISTORY_UNIT": "MINUTES",
        }
    )
    assert config == PurgeConfig(
        enabled=True,
        execute_on_startup=True,
        execution_interval=2,
        execution_interval_unit=TimeUnit.SECONDS,
        max_history=5,
        max_history_unit=TimeUnit.MINUTES,
    )


def test_mapping_rejects_bad_values():
    with pytest.raises(PurgeConfigError, match="integer"):
        config_from_mapping({"maxHistory": "thirty"})
    with pytest.raises(PurgeConfigError, match="unknown time unit"):
        config_from_mapping({"maxHistoryUnit": "WEEKS"})
    with pytest.raises(PurgeConfigError, match="maxHistoryUnit"):
        config_from_mapping({"maxHistoryUnit": "MILLISECONDS"})


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "purge.yml"
    path.write_text(
        "accesslog:\n"
        "  purge:\n"
        "    enabled: true\n"
        "    executeOnStartup: true\n"
        "    maxHistory: 7\n"
    )
    config = load_config(path)
    assert config.enabled and config.execute_on_startup
    assert config.max_history == 7
    assert config.max_history_unit is TimeUnit.DAYS


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "nope.yml") == {}
    assert load_config(tmp_path / "nope.yml") == PurgeConfig()


def test_invalid_yaml_raises(tmp_path):
    path = tmp_path / "purge.yml"
    path.write_text("accesslog: [unclosed\n")
    with pytest.raises(PurgeConfigError):
        load_config(path)


def test_invalid_values_in_file_are_fatal(tmp_path):
    path = tmp_path / "purge.yml"
    path.write_text("accesslog:\n  purge:\n    executionInterval: 0\n")
    with pytest.raises(PurgeConfigError, match="executionInterval"):
        load_config(path)
