import os
import importlib
from unittest.mock import patch

import pytest
from loguru import logger as loguru_logger
from pydantic import ValidationError

from parkflow.config.settings_env import Settings


def test_settings():
    settings = Settings()
    assert settings.DEFAULT_BILLING_MODE == "per_minute"
    assert settings.DEFAULT_MAX_DURATION_HOURS > 0


def test_settings_from_environment():
    with patch.dict(os.environ, {"CURRENCY": "USD", "DEFAULT_MAX_DURATION_HOURS": "6"}):
        settings = Settings()
    assert settings.CURRENCY == "USD"
    assert settings.DEFAULT_MAX_DURATION_HOURS == 6.0


def test_settings_rejects_non_positive_maximum_duration():
    with pytest.raises(ValidationError):
        Settings(DEFAULT_MAX_DURATION_HOURS=0)


def test_initialize_logger_dev_mode():
    with patch.dict(os.environ, {"DEV_MODE": "True"}):
        # Reload settings_env to pick up the patched environment variable
        import parkflow.config.settings_env as settings_env
        importlib.reload(settings_env)

        # Reload utils to re-initialize the logger with new settings
        import parkflow.shared.utils
        importlib.reload(parkflow.shared.utils)

        logger = parkflow.shared.utils.initialize_logger()
        assert logger.level("TRACE").no == loguru_logger.level("TRACE").no


def test_initialize_logger_prod_mode():
    with patch.dict(os.environ, {"DEV_MODE": "False"}):
        import parkflow.config.settings_env as settings_env
        importlib.reload(settings_env)

        import parkflow.shared.utils
        importlib.reload(parkflow.shared.utils)

        logger = parkflow.shared.utils.initialize_logger()
        assert logger.level("INFO").no == loguru_logger.level("INFO").no


def test_initialize_logger_writes_log_file(tmp_path):
    log_file = tmp_path / "parkflow.log"
    with patch.dict(os.environ, {"LOG_FILE": str(log_file)}):
        import parkflow.config.settings_env as settings_env
        importlib.reload(settings_env)

        import parkflow.shared.utils
        importlib.reload(parkflow.shared.utils)

        parkflow.shared.utils.logger.info("Lot 1 settings updated")

    assert "Lot 1 settings updated" in log_file.read_text()

    importlib.reload(settings_env)
    importlib.reload(parkflow.shared.utils)
