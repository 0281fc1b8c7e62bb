import os

import pytest

from flagged_respawn import config, paths


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Point the config layer at an empty temp file and drop env overrides.

    Provides the path of the (not yet existing) config.yaml.
    """
    for key in list(os.environ):
        if key.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(key)
    config_path = tmp_path / "config.yaml"
    monkeypatch.setenv(paths.CONFIG_ENV, str(config_path))
    config.clear_cache()

    yield config_path

    config.clear_cache()
