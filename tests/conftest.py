import os

import pytest

from chainzmq.config.zmq_config import reset_zmq_config


@pytest.fixture(autouse=True)
def isolated_zmq_env(monkeypatch, tmp_path):
    """Keep host ZMQ_* variables and any .env file out of config tests."""
    for key in list(os.environ):
        if key.upper().startswith("ZMQ_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_zmq_config()
    yield
    reset_zmq_config()
