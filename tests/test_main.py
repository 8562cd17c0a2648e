"""
Test Application Entry Point

Runs the status report end to end against a fake controller connection.
"""

from unittest.mock import patch

import pytest

from clearcore.main import ControllerApplication, main, parse_args
from tests.fakes import FakeTransport, ScriptedController


@pytest.fixture
def fake_controller():
    scripted = ScriptedController()
    scripted.script('GS', b'1')
    scripted.script('GP', b'1600')
    scripted.script('GV', b'512')
    return scripted


@pytest.fixture
def patched_app(fake_controller, base_config, write_config, tmp_path):
    transport = FakeTransport(fake_controller)
    with patch('clearcore.controller.create_transport', return_value=transport), \
         patch('clearcore.main.setup_logging') as mock_logging:
        app = ControllerApplication(write_config(base_config), log_dir=tmp_path)
        yield app, transport, mock_logging


class TestControllerApplication:
    """Test application wiring"""

    def test_initialize(self, patched_app):
        app, transport, mock_logging = patched_app

        assert app.initialize()
        mock_logging.assert_called_once_with('INFO', log_dir=app.log_dir, enable_file=True)
        assert app.controller.dispatcher.transport is transport

    def test_initialize_missing_config(self, tmp_path):
        app = ControllerApplication(tmp_path / "missing.yaml")
        assert not app.initialize()
        assert app.controller is None

    @pytest.mark.asyncio
    async def test_report_status(self, patched_app, fake_controller):
        app, transport, _ = patched_app
        app.initialize()

        async with app.controller:
            report = await app.report_status()

        assert [m['id'] for m in report['motors']] == [0, 1, 2, 3]
        assert report['motors'][0] == {'id': 0, 'status': 'ENABLING', 'position': 2.0}
        assert report['motors'][2]['position'] == 1.6
        assert report['digital_inputs'] == [True, True, True]
        assert report['analog_inputs'] == [512] * 4
        assert transport.written[:2] == [b'\x02M0GS\r', b'\x02M0GP\r']

    @pytest.mark.asyncio
    async def test_run_succeeds_and_disconnects(self, patched_app):
        app, transport, _ = patched_app

        assert await app.run()
        assert transport.closed

    @pytest.mark.asyncio
    async def test_run_reports_controller_errors(self, patched_app, fake_controller):
        app, transport, _ = patched_app
        fake_controller.fail('GP')

        assert not await app.run()
        assert transport.closed


class TestMain:
    """Test command line handling"""

    def test_parse_args(self, tmp_path):
        args = parse_args(['--config', str(tmp_path / 'c.yaml'), '--no-file-log'])
        assert args.config == tmp_path / 'c.yaml'
        assert args.no_file_log
        assert args.log_dir is None

    def test_missing_config_exit_code(self, tmp_path):
        assert main(['--config', str(tmp_path / 'missing.yaml'), '--no-file-log']) == 1
