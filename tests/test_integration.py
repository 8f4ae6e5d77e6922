#!/usr/bin/env python3
"""
Integration tests for the grid monitor
"""

import io
import logging
import unittest
import tempfile
import os
import sys
from unittest import mock

import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import main
from depth_grid import config
from depth_grid.config import DisplayMode, GridConfig
from depth_grid.controller import FrameController
from depth_grid.sensor import KinectSensor


class FakeSensor:
    """Sensor stand-in that delivers a fixed list of frames"""

    def __init__(self, frames, init_ok=True):
        self.frames = frames
        self.init_ok = init_ok
        self.flags = []
        self.cleaned_up = False

    def initialize(self):
        return self.init_ok

    def run(self, on_frame, out_of_range, shutdown_event):
        for timestamp, frame in enumerate(self.frames):
            on_frame(frame, timestamp)
            self.flags.append(out_of_range.is_set())

    def cleanup(self):
        self.cleaned_up = True


class TestMonitorIntegration(unittest.TestCase):
    """Run the monitor end to end against a fake sensor"""

    def setUp(self):
        self.stream = io.StringIO()
        self.logger = logging.getLogger("test_integration")
        self.config = GridConfig(divisions=4)

    def test_stats_frames(self):
        frames = [
            np.full((480, 640), 500, dtype=np.uint16),
            np.full((480, 640), config.OUT_OF_RANGE, dtype=np.uint16),
            np.full((480, 640), 700, dtype=np.uint16),
        ]
        sensor = FakeSensor(frames)
        controller = FrameController(self.config, stream=self.stream)

        self.assertEqual(main.run(controller, sensor, self.logger), 0)

        self.assertEqual(controller.frame_count, 3)
        self.assertEqual(sensor.flags, [False, True, False])
        self.assertTrue(sensor.cleaned_up)

        output = self.stream.getvalue()
        self.assertEqual(output.count(config.CLEAR_SCREEN), 3)
        self.assertIn("Time: 1 frame: 1 out: 100%", output)
        self.assertIn("Tot 19200", output)

    def test_bad_frame_skipped(self):
        frames = [
            np.zeros((10, 10), dtype=np.uint16),
            np.full((480, 640), 500, dtype=np.uint16),
        ]
        sensor = FakeSensor(frames)
        controller = FrameController(self.config, stream=self.stream)

        with self.assertLogs("test_integration", level="ERROR"):
            self.assertEqual(main.run(controller, sensor, self.logger), 0)
        self.assertEqual(controller.frame_count, 1)

    def test_ascii_frames(self):
        grid_config = GridConfig(divisions=2, display_mode=DisplayMode.ASCII)
        frame = np.full((480, 640), config.OUT_OF_RANGE, dtype=np.uint16)
        controller = FrameController(grid_config, stream=self.stream)

        main.run(controller, FakeSensor([frame]), self.logger)
        self.assertTrue(self.stream.getvalue().endswith("..\n..\n"))

    def test_sensor_init_failure(self):
        sensor = FakeSensor([], init_ok=False)
        controller = FrameController(self.config, stream=self.stream)
        self.assertEqual(main.run(controller, sensor, self.logger), 1)
        self.assertTrue(sensor.cleaned_up)

    def test_sensor_init_failure_releases_kinect(self):
        backend = mock.MagicMock()
        backend.num_devices.return_value = 0
        sensor = KinectSensor(self.logger, backend=backend)
        controller = FrameController(self.config, stream=self.stream)

        self.assertEqual(main.run(controller, sensor, self.logger), 1)
        backend.shutdown.assert_called_once_with(backend.init.return_value)
        backend.start_depth.assert_not_called()

    def test_sensor_init_error_still_cleans_up(self):
        class BrokenSensor(FakeSensor):
            def initialize(self):
                raise RuntimeError("usb error")

        sensor = BrokenSensor([])
        controller = FrameController(self.config, stream=self.stream)
        with self.assertRaises(RuntimeError):
            main.run(controller, sensor, self.logger)
        self.assertTrue(sensor.cleaned_up)


class TestCommandLine(unittest.TestCase):
    """Test argument handling"""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        logger = logging.getLogger(config.LOG_NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        args = main.parse_args([])
        self.assertEqual(args.divisions, config.DEFAULT_DIVISIONS)
        self.assertEqual(args.mode, "stats")
        self.assertEqual(args.near, 0.5)
        self.assertEqual(args.far, 5.0)

    def test_build_config(self):
        args = main.parse_args(["-g", "4", "-m", "histogram", "-n", "1.0", "-f", "3.0"])
        grid_config = main.build_config(args, 200, 50)
        self.assertEqual(grid_config.divisions, 4)
        self.assertEqual(grid_config.display_mode, DisplayMode.HISTOGRAM)
        self.assertEqual(grid_config.box_width, 46)
        self.assertEqual(grid_config.histogram_rows, 11)
        self.assertEqual(grid_config.near_clip, 1.0)
        self.assertEqual(grid_config.far_clip, 3.0)

    def test_invalid_divisions_exit_code(self):
        code = main.main(["-g", "0", "--log-dir", self.test_dir])
        self.assertEqual(code, 2)
        with open(os.path.join(self.test_dir, "kingrid.log")) as f:
            self.assertIn("Invalid configuration", f.read())

    def test_unknown_mode_rejected(self):
        with self.assertRaises(SystemExit):
            main.parse_args(["-m", "color"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
