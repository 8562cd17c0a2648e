"""
pytest configuration and fixtures for the ClearCore client tests.

Provides:
- Fake transports and dispatchers (no controller required)
- Temporary YAML configuration files
- Root logger save/restore for logging tests
"""

import logging
from pathlib import Path

import pytest
import yaml

from clearcore.communication.dispatcher import ConnectionDispatcher
from tests.fakes import FakeTransport, ScriptedController


BASE_CONFIG = {
    'system': {'log_level': 'INFO'},
    'controller': {
        'connection': 'tcp',
        'host': '127.0.0.1',
        'port': 8888,
        'queue_size': 10,
        'request_timeout': None,
        'poll_interval': 0.25,
    },
    'motors': [
        {'id': 0, 'scale': 800},
        {'id': 1, 'scale': 800},
        {'id': 2, 'scale': 1000},
        {'id': 3, 'scale': 1000},
    ],
}


@pytest.fixture
def scripted():
    """Responder answering by command code"""
    return ScriptedController()


@pytest.fixture
def transport(scripted):
    return FakeTransport(scripted)


@pytest.fixture
def dispatcher(transport):
    """Dispatcher over the fake transport; tests start and stop it"""
    return ConnectionDispatcher(transport)


@pytest.fixture
def base_config():
    """A fresh copy of a valid configuration mapping"""
    return yaml.safe_load(yaml.safe_dump(BASE_CONFIG))


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration mapping to a YAML file and return its path"""
    def _write(data, name: str = "clearcore_config.yaml") -> Path:
        path = tmp_path / name
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f)
        return path
    return _write


@pytest.fixture
def restore_logging():
    """Put the root logger back the way it was after a logging test"""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)
    for name in ('clearcore.communication', 'clearcore.motion'):
        module_logger = logging.getLogger(name)
        for handler in module_logger.handlers[:]:
            module_logger.removeHandler(handler)
            handler.close()
