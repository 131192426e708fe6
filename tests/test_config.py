import pytest
import yaml
from pydantic import ValidationError

from vocabfsrs.config import Settings, get_settings
from vocabfsrs.exceptions import ParameterFileError
from vocabfsrs.models import SchedulerParams


def test_defaults_build_documented_parameter_set():
    settings = get_settings()
    assert settings.log_level == "WARNING"
    assert settings.params_file is None
    assert settings.scheduler_params() == SchedulerParams()


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("VOCABFSRS_REQUEST_RETENTION", "0.85")
    monkeypatch.setenv("VOCABFSRS_MAXIMUM_INTERVAL", "365")
    monkeypatch.setenv("VOCABFSRS_ENABLE_FUZZ", "false")

    params = Settings().scheduler_params()

    assert params.request_retention == 0.85
    assert params.maximum_interval == 365
    assert params.enable_fuzz is False


def test_dotenv_file_is_read(tmp_path):
    # conftest chdirs into tmp_path, so .env here is picked up.
    (tmp_path / ".env").write_text("VOCABFSRS_LOG_LEVEL=DEBUG\n")
    assert Settings().log_level == "DEBUG"


def test_params_file_takes_precedence(tmp_path, monkeypatch):
    path = tmp_path / "params.yaml"
    path.write_text(yaml.safe_dump({"requestRetention": 0.7}))
    monkeypatch.setenv("VOCABFSRS_PARAMS_FILE", str(path))
    monkeypatch.setenv("VOCABFSRS_REQUEST_RETENTION", "0.85")

    assert Settings().scheduler_params().request_retention == 0.7


def test_missing_params_file_raises(tmp_path):
    settings = Settings(params_file=tmp_path / "nope.yaml")
    with pytest.raises(ParameterFileError):
        settings.scheduler_params()


def test_invalid_environment_value_is_rejected(monkeypatch):
    monkeypatch.setenv("VOCABFSRS_REQUEST_RETENTION", "1.5")
    with pytest.raises(ValidationError):
        Settings()
