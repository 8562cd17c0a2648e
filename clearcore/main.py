#!/usr/bin/env python3
"""
ClearCore Client - Application Entry Point

Loads configuration, sets up logging, connects to the controller and
reports the state of every motor and input, then disconnects.

Author: ClearCore Client Development
Created: October 2026
Python: 3.10+
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .controller import ControllerHandle, create_controller
from .core.config_manager import ConfigManager
from .core.exceptions import ClearCoreError
from .core.logging_setup import setup_logging

DEFAULT_CONFIG_PATH = Path("config") / "clearcore_config.yaml"


class ControllerApplication:
    """Wires configuration, logging and the controller handle together"""

    def __init__(self, config_path: Union[str, Path] = DEFAULT_CONFIG_PATH,
                 log_dir: Optional[Path] = None, enable_file_logging: bool = True):
        self.config_path = Path(config_path)
        self.log_dir = log_dir
        self.enable_file_logging = enable_file_logging

        self.config: Optional[ConfigManager] = None
        self.controller: Optional[ControllerHandle] = None
        self.logger = logging.getLogger(__name__)

    def initialize(self) -> bool:
        """Load configuration, setup logging and build the controller handle"""
        try:
            self.config = ConfigManager(self.config_path)
        except ClearCoreError as e:
            self.logger.error(f"Failed to load configuration: {e}")
            return False

        setup_logging(self.config.get_log_level(), log_dir=self.log_dir,
                      enable_file=self.enable_file_logging)
        self.logger.info("=== ClearCore Client Starting ===")
        self.logger.info(f"Configuration: {self.config.get_summary()}")

        self.controller = create_controller(self.config)
        return True

    async def report_status(self) -> Dict[str, Any]:
        """Query every motor and input once"""
        motors: List[Dict[str, Any]] = []
        for motor in self.controller.get_motors():
            status = await motor.get_status()
            position = await motor.get_position()
            motors.append({'id': motor.id, 'status': status.name, 'position': position})
            self.logger.info(f"Motor {motor.id}: {status.name} at {position:.3f}")

        digital_inputs = [await di.get_state() for di in self.controller.get_digital_inputs()]
        analog_inputs = [await ai.get_value() for ai in self.controller.get_analog_inputs()]
        self.logger.info(f"Digital inputs: {digital_inputs}")
        self.logger.info(f"Analog inputs: {analog_inputs}")

        return {
            'motors': motors,
            'digital_inputs': digital_inputs,
            'analog_inputs': analog_inputs,
        }

    async def run(self) -> bool:
        """Connect, report and disconnect"""
        if self.controller is None and not self.initialize():
            return False

        try:
            async with self.controller:
                await self.report_status()
        except ClearCoreError as e:
            self.logger.error(f"Controller error: {e}")
            return False
        finally:
            self.logger.info("=== ClearCore Client stopped ===")

        return True


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Report ClearCore controller status")
    parser.add_argument('--config', type=Path, default=DEFAULT_CONFIG_PATH,
                        help=f"Path to YAML configuration (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument('--log-dir', type=Path, default=None,
                        help="Directory for log files (default: ~/clearcore_logs)")
    parser.add_argument('--no-file-log', action='store_true',
                        help="Log to the console only")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    app = ControllerApplication(args.config, log_dir=args.log_dir,
                                enable_file_logging=not args.no_file_log)

    try:
        success = asyncio.run(app.run())
    except KeyboardInterrupt:
        return 1
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
