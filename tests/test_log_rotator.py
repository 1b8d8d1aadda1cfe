"""
Tests for log rotation.

The rotator compresses rotated files with gzip when TimedRotatingFileHandler
rolls over.
"""

import gzip
import logging
import logging.handlers

from proc_exporter.logger import rotator


class TestLogRotation:
    """Test log file rotation and compression with a real logger."""

    def test_log_rotation_with_compression(self, tmp_path):
        log_file = tmp_path / "proc_exporter.log"

        test_logger = logging.getLogger("test_rotation")
        test_logger.setLevel(logging.INFO)
        test_logger.handlers.clear()

        handler = logging.handlers.TimedRotatingFileHandler(
            log_file, when="S", backupCount=5
        )
        handler.rotator = rotator
        test_logger.addHandler(handler)

        for i in range(10):
            test_logger.info(f'Cpuinfo{{process="sshd"}} - {i}')

        handler.doRollover()

        for i in range(10, 20):
            test_logger.info(f'Cpuinfo{{process="sshd"}} - {i}')

        assert log_file.exists()

        compressed_files = list(tmp_path.glob("*.gz"))
        assert len(compressed_files) > 0, "No compressed log file found"

        with gzip.open(compressed_files[0], "rt", encoding="utf-8") as f:
            content = f.read()
            assert 'Cpuinfo{process="sshd"} - 0' in content
            assert 'Cpuinfo{process="sshd"} - 9' in content
            assert 'Cpuinfo{process="sshd"} - 10' not in content

        with open(log_file, "r", encoding="utf-8") as f:
            current_content = f.read()
            assert 'Cpuinfo{process="sshd"} - 10' in current_content
            assert 'Cpuinfo{process="sshd"} - 19' in current_content

        handler.close()
        test_logger.handlers.clear()
