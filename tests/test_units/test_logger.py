import io
import logging
import unittest
from contextlib import redirect_stderr
from logging.handlers import RotatingFileHandler
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import patch

import settings
from judgeserver.logger import LoggerManager


class LoggerManagerTest(unittest.TestCase):

    def setUp(self):
        self.tmp = TemporaryDirectory()
        self.log_file = Path(self.tmp.name) / 'judge.log'

    def tearDown(self):
        self.tmp.cleanup()

    def test_records_reach_file(self):
        manager = LoggerManager('judge', self.log_file, 'debug')
        manager.set_formatter('%(levelname)s %(message)s')
        manager.start()
        manager.logger.debug("Judging '%s'", 'sum')
        manager.logger.error('Cannot load test cases')
        manager.stop()

        lines = self.log_file.read_text(encoding='utf-8').splitlines()
        self.assertEqual(lines, ["DEBUG Judging 'sum'", 'ERROR Cannot load test cases'])

    def test_level_filters(self):
        manager = LoggerManager('judge', self.log_file, 'WARNING')
        manager.start()
        manager.logger.info('not written')
        manager.logger.warning('written')
        manager.stop()
        self.assertEqual(self.log_file.read_text(encoding='utf-8').strip(), 'written')

    def test_console_echo(self):
        with redirect_stderr(io.StringIO()) as err:
            manager = LoggerManager('judge', self.log_file, logging.INFO, console=True)
            manager.start()
            manager.logger.info('Score 2/3')
            manager.stop()
        self.assertEqual(len(manager.outputs), 2)
        self.assertIn('Score 2/3', err.getvalue())
        self.assertIn('Score 2/3', self.log_file.read_text(encoding='utf-8'))

    def test_start_and_stop_twice(self):
        manager = LoggerManager('judge', self.log_file, logging.INFO)
        self.assertFalse(manager.running)
        manager.start()
        manager.start()
        self.assertTrue(manager.running)
        manager.logger.info('once')
        manager.stop()
        manager.stop()
        self.assertFalse(manager.running)
        self.assertEqual(self.log_file.read_text(encoding='utf-8').count('once'), 1)

    def test_parse_level(self):
        self.assertEqual(LoggerManager.parse_level('info'), logging.INFO)
        self.assertEqual(LoggerManager.parse_level(' Error '), logging.ERROR)
        self.assertEqual(LoggerManager.parse_level(15), 15)
        self.assertRaises(ValueError, LoggerManager.parse_level, 'loud')

    def test_from_settings(self):
        with patch.object(settings, 'LOG_FILE', self.log_file), \
                patch.object(settings, 'LOG_LEVEL', 'debug'), \
                patch.object(settings, 'LOG_TO_CONSOLE', False), \
                patch.object(settings, 'LOG_MAX_BYTES', 2048), \
                patch.object(settings, 'LOG_BACKUP_COUNT', 2):
            manager = LoggerManager.from_settings('judgeserver.main')
        manager.start()
        manager.logger.debug('configured')
        manager.stop()

        self.assertEqual(manager.logger.name, 'judgeserver.main')
        self.assertEqual(manager.logger.level, logging.DEBUG)
        file_handler, = manager.outputs
        self.assertIsInstance(file_handler, RotatingFileHandler)
        self.assertEqual(file_handler.maxBytes, 2048)
        self.assertEqual(file_handler.backupCount, 2)
        # LOGGER_PROMPT puts the logger name in every line
        self.assertIn('judgeserver.main:', self.log_file.read_text(encoding='utf-8'))


if __name__ == '__main__':
    unittest.main()
