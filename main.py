#!/usr/bin/env python3
"""
Main entry point for the Kinect grid monitor
Shows per-cell depth statistics for a grid laid over the Kinect depth image
"""

import sys
import os
import signal
import argparse
import logging
from threading import Event

from depth_grid import config, utils
from depth_grid.config import ConfigError, DisplayMode, GridConfig
from depth_grid.controller import FrameController, FrameShapeError
from depth_grid.sensor import KinectSensor

# Global shutdown event
shutdown_event = Event()


def signal_handler(signum, frame):
    """Handle termination signals"""
    logger = logging.getLogger(config.LOG_NAME)
    logger.info(f"Exiting due to signal {signum} ({signal.Signals(signum).name})")
    shutdown_event.set()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Display grid-based depth statistics from a Kinect")
    parser.add_argument("-g", "--divisions", type=int, default=config.DEFAULT_DIVISIONS,
                        help=f"Grid divisions for both dimensions (default: {config.DEFAULT_DIVISIONS})")
    parser.add_argument("-m", "--mode", choices=[mode.value for mode in DisplayMode], default=DisplayMode.STATS.value,
                        help="Display mode (default: stats)")
    parser.add_argument("-n", "--near", type=float, default=config.DEFAULT_NEAR_CLIP,
                        help=f"Near clipping distance in meters for ascii mode (default: {config.DEFAULT_NEAR_CLIP})")
    parser.add_argument("-f", "--far", type=float, default=config.DEFAULT_FAR_CLIP,
                        help=f"Far clipping distance in meters for ascii mode (default: {config.DEFAULT_FAR_CLIP})")
    parser.add_argument("-t", "--tilt", type=int, default=config.DEFAULT_TILT,
                        help=f"Sensor tilt in degrees (default: {config.DEFAULT_TILT})")
    parser.add_argument("-d", "--device", type=int, default=0, help="Kinect device index (default: 0)")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    parser.add_argument("--log-dir", default=config.LOG_DIR, help="Log directory")
    return parser.parse_args(argv)


def build_config(args, columns, lines) -> GridConfig:
    """Build the grid configuration from arguments and terminal size"""
    return GridConfig.from_terminal(
        columns,
        lines,
        divisions=args.divisions,
        near_clip=args.near,
        far_clip=args.far,
        display_mode=DisplayMode(args.mode),
    )


def run(controller: FrameController, sensor, logger) -> int:
    """Stream frames from the sensor into the controller until shutdown"""

    def on_frame(depth, timestamp):
        try:
            controller.process_frame(depth, timestamp)
        except FrameShapeError as e:
            logger.error(f"Skipping frame: {e}")

    try:
        if not sensor.initialize():
            print("Failed to initialize Kinect - check logs", file=sys.stderr)
            return 1
        sensor.run(on_frame, controller.out_of_range, shutdown_event)
    finally:
        # Release whatever initialize() managed to open
        sensor.cleanup()

    logger.info(f"Processed {controller.frame_count} frames")
    return 0


def main(argv=None):
    """Main function"""
    args = parse_args(argv)

    utils.ensure_directory(args.log_dir)
    log_file = os.path.join(args.log_dir, "kingrid.log")
    logger = utils.setup_logging(config.LOG_NAME, log_file, args.log_level, console=False)

    try:
        columns, lines = utils.terminal_size()
        grid_config = build_config(args, columns, lines)
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        logger.error(f"Invalid configuration: {e}")
        return 2

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    controller = FrameController(grid_config, logger=logger)
    sensor = KinectSensor(logger, device_index=args.device, tilt=args.tilt)

    try:
        return run(controller, sensor, logger)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
