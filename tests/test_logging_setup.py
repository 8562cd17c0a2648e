"""
Test Logging Setup
"""

import logging

import pytest

from clearcore.core.logging_setup import (
    ColoredFormatter, ModuleFilter, SubsystemLogFilter, setup_logging
)


def make_record(name: str, level: int = logging.INFO, msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


class TestFilters:
    """Test record filters"""

    @pytest.mark.parametrize("name, subsystem", [
        ('clearcore.communication.dispatcher', 'communication'),
        ('clearcore.motion.motor', 'motion'),
        ('clearcore', 'system'),
        ('asyncio', 'system'),
    ])
    def test_subsystem_tagging(self, name, subsystem):
        record = make_record(name)
        assert SubsystemLogFilter().filter(record)
        assert record.subsystem == subsystem

    def test_module_filter(self):
        module_filter = ModuleFilter('clearcore.motion')
        assert module_filter.filter(make_record('clearcore.motion.motor'))
        assert not module_filter.filter(make_record('clearcore.devices.inputs'))

    def test_colored_formatter_leaves_record_plain(self):
        record = make_record('clearcore.motion.motor', logging.ERROR)
        output = ColoredFormatter('%(levelname)s %(message)s').format(record)

        assert '\033[31m' in output
        assert record.levelname == 'ERROR'


class TestSetupLogging:
    """Test handler configuration"""

    def test_console_only(self, restore_logging, tmp_path):
        root = setup_logging('WARNING', log_dir=tmp_path, enable_file=False)

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not list(tmp_path.iterdir())

    def test_file_logging(self, restore_logging, tmp_path):
        root = setup_logging('DEBUG', log_dir=tmp_path / 'logs', enable_console=False)
        logging.getLogger('clearcore.motion.motor').error("motor 0 faulted")
        for handler in root.handlers + logging.getLogger('clearcore.motion').handlers:
            handler.flush()

        log_dir = tmp_path / 'logs'
        assert 'motor 0 faulted' in (log_dir / 'clearcore.log').read_text(encoding='utf-8')
        assert 'motor 0 faulted' in (log_dir / 'clearcore_errors.log').read_text(encoding='utf-8')
        assert 'motor 0 faulted' in (log_dir / 'motion_control.log').read_text(encoding='utf-8')
        assert 'motor 0 faulted' not in (log_dir / 'communication.log').read_text(encoding='utf-8')

    def test_repeated_setup_does_not_stack_handlers(self, restore_logging, tmp_path):
        setup_logging('INFO', log_dir=tmp_path, enable_console=False)
        setup_logging('INFO', log_dir=tmp_path, enable_console=False)

        assert len(logging.getLogger().handlers) == 2
        assert len(logging.getLogger('clearcore.communication').handlers) == 1
