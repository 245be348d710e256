"""
Unit Tests for Utilities
========================

Test Coverage:
- Validation helpers (types, ranges, arrays, time windows, configs)
- Logging setup, execution timing and temporary log levels
"""

import logging

import pytest
import numpy as np

from eegprep.core.exceptions import DataValidationError
from eegprep.utils.validation import (
    check_positive,
    check_range,
    check_type,
    validate_array,
    validate_config,
    validate_config_value,
    validate_time_window,
)
from eegprep.utils.logging import (
    LogLevel,
    get_logger,
    log_execution_time,
    set_level,
    setup_logging,
    setup_logging_from_config,
)


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestValidation:
    """Test cases for the validation helpers."""

    def test_check_type(self):
        """Test type checks."""
        check_type(1.0, (int, float), 'cutoff')
        with pytest.raises(TypeError, match="'cutoff' must be int or float"):
            check_type('1', (int, float), 'cutoff')

    def test_check_range(self):
        """Test inclusive and exclusive bounds."""
        check_range(0.0, min_val=0.0)
        with pytest.raises(ValueError):
            check_range(0.0, min_val=0.0, inclusive=False)
        with pytest.raises(ValueError):
            check_range(129.0, max_val=128.0)

    def test_check_positive(self):
        """Test positivity checks."""
        check_positive(3.0)
        check_positive(0, allow_zero=True)
        with pytest.raises(ValueError):
            check_positive(0)
        with pytest.raises(ValueError):
            check_positive(-1, allow_zero=True)

    def test_validate_array(self):
        """Test array checks."""
        validate_array(np.zeros((10, 2)), expected_ndim=2, min_samples=5)

        with pytest.raises(TypeError):
            validate_array([[0.0]])
        with pytest.raises(ValueError):
            validate_array(np.zeros(10), expected_ndim=2)
        with pytest.raises(ValueError):
            validate_array(np.zeros((3, 2)), min_samples=5)
        with pytest.raises(ValueError):
            validate_array(np.array([0.0, np.inf]))
        validate_array(np.array([0.0, np.nan]), allow_nan=True)

    def test_validate_time_window(self):
        """Test (start, end) windows."""
        assert validate_time_window((-0.2, 0.8)) == (-0.2, 0.8)
        assert validate_time_window([None, 0], allow_open=True) == (None, 0.0)

        with pytest.raises(DataValidationError):
            validate_time_window((None, 0.0))
        with pytest.raises(DataValidationError):
            validate_time_window((0.5, 0.5))
        with pytest.raises(DataValidationError):
            validate_time_window(0.5)

    def test_validate_config(self):
        """Test required and unknown keys."""
        validate_config({'low_freq': 1.0}, required_keys=['low_freq'])

        with pytest.raises(TypeError):
            validate_config(['low_freq'])
        with pytest.raises(ValueError):
            validate_config({}, required_keys=['low_freq'])
        with pytest.raises(ValueError):
            validate_config({'low_freq': 1.0, 'x': 2}, ['low_freq'], strict=True)

    def test_validate_config_value(self):
        """Test single-value checks; missing keys are allowed."""
        validate_config_value({}, 'order', int, min_val=1)
        validate_config_value({'method': 'fir'}, 'method', str, choices=['iir', 'fir'])

        with pytest.raises(ValueError):
            validate_config_value({'order': 0}, 'order', int, min_val=1)
        with pytest.raises(ValueError):
            validate_config_value({'method': 'bessel'}, 'method', str, choices=['iir', 'fir'])


class TestLogging:
    """Test cases for the logging helpers."""

    def test_log_execution_time(self, caplog):
        """Test the decorator logs and returns the result."""
        log = logging.getLogger('eegprep.tests.timing')

        @log_execution_time(logger=log)
        def double(x):
            return x * 2

        with caplog.at_level(logging.DEBUG, logger='eegprep.tests.timing'):
            assert double(21) == 42
        assert 'double executed in' in caplog.text
        assert double.__name__ == 'double'

    def test_log_level_context(self):
        """Test LogLevel restores the previous level."""
        log = logging.getLogger('eegprep.tests.level')
        log.setLevel(logging.WARNING)

        with LogLevel('DEBUG', 'eegprep.tests.level'):
            assert log.level == logging.DEBUG
        assert log.level == logging.WARNING

    def test_set_level(self):
        """Test set_level on a named logger."""
        set_level('ERROR', 'eegprep.tests.set')
        assert get_logger('eegprep.tests.set').level == logging.ERROR

    def test_setup_logging_file(self, restore_root_logger, tmp_path):
        """Test logging to a file."""
        log_file = tmp_path / 'logs' / 'run.log'
        setup_logging(level='DEBUG', log_file=str(log_file), console=False)
        get_logger('eegprep.tests.file').info('written to file')

        for handler in restore_root_logger.handlers:
            handler.flush()
        assert 'written to file' in log_file.read_text()

    def test_setup_from_config(self, restore_root_logger, tmp_path):
        """Test the configuration's logging section is applied."""
        log_file = tmp_path / 'eegprep.log'
        setup_logging_from_config(
            {'level': 'WARNING', 'file': str(log_file), 'detailed': True}, console=False
        )

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        assert log_file.exists()

    def test_setup_from_empty_config(self, restore_root_logger):
        """Test missing settings fall back to INFO without a file."""
        setup_logging_from_config(None, console=False)
        assert restore_root_logger.level == logging.INFO
        assert restore_root_logger.handlers == []

    def test_setup_without_outputs(self, restore_root_logger, capsys):
        """Test console=False without a file installs no handler."""
        setup_logging(level='INFO', console=False)
        get_logger('eegprep.tests.silent').info('nowhere')

        assert restore_root_logger.handlers == []
        assert capsys.readouterr().err == ''
