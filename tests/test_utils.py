#!/usr/bin/env python3
"""
Unit tests for monitor utilities
"""

import logging
import unittest
import tempfile
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from depth_grid import utils


class TestUtils(unittest.TestCase):
    """Test utility functions"""

    def setUp(self):
        """Set up test environment"""
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test environment"""
        import shutil
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_ensure_directory(self):
        """Test directory creation"""
        test_subdir = os.path.join(self.test_dir, "subdir", "nested")

        # Test creating nested directory
        result = utils.ensure_directory(test_subdir)
        self.assertTrue(result)
        self.assertTrue(os.path.isdir(test_subdir))

        # Test with existing directory
        result = utils.ensure_directory(test_subdir)
        self.assertTrue(result)

    def test_ensure_directory_over_file(self):
        """Test directory creation where a file is in the way"""
        blocker = os.path.join(self.test_dir, "blocker")
        with open(blocker, "w") as f:
            f.write("x")

        self.assertFalse(utils.ensure_directory(os.path.join(blocker, "sub")))

    def test_terminal_size(self):
        columns, lines = utils.terminal_size((120, 40))
        self.assertIsInstance(columns, int)
        self.assertIsInstance(lines, int)
        self.assertGreater(columns, 0)
        self.assertGreater(lines, 0)


class TestLogging(unittest.TestCase):
    """Test logging setup"""

    def setUp(self):
        """Set up test environment"""
        self.test_dir = tempfile.mkdtemp()
        self.loggers = []

    def tearDown(self):
        """Clean up test environment"""
        import shutil
        for logger in self.loggers:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def setup(self, name, console=True):
        log_file = os.path.join(self.test_dir, f"{name}.log")
        logger = utils.setup_logging(name, log_file, "INFO", console=console)
        self.loggers.append(logger)
        return logger, log_file

    def test_setup_logging(self):
        """Test logger setup"""
        logger, log_file = self.setup("test_logger")

        self.assertEqual(logger.name, "test_logger")
        self.assertEqual(logger.level, logging.INFO)

        logger.info("Test message")

        self.assertTrue(os.path.exists(log_file))
        with open(log_file, 'r') as f:
            log_content = f.read()
        self.assertIn("Test message", log_content)
        self.assertIn("INFO", log_content)

    def test_file_only_logging(self):
        """Test logger without a console handler"""
        logger, _ = self.setup("test_file_only", console=False)
        self.assertEqual(len(logger.handlers), 1)
        self.assertIsInstance(logger.handlers[0], logging.FileHandler)

    def test_setup_twice_does_not_duplicate(self):
        """Test repeated setup replaces earlier handlers"""
        logger, log_file = self.setup("test_repeat")
        logger, log_file = self.setup("test_repeat")
        self.assertEqual(len(logger.handlers), 2)

        logger.info("Once only")
        with open(log_file, 'r') as f:
            self.assertEqual(f.read().count("Once only"), 1)


if __name__ == "__main__":
    # Run tests
    unittest.main(verbosity=2)
