"""
Logging utilities for the Weight Lifting Quality Report.

Provides structured logging with separate handlers for:
- Console output (minimal, essential information only)
- File output (detailed logging for debugging)
- Per-model training results (CSV)
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional, Any

LOGGER_PREFIX = 'lift_ml'

# Logger name -> log file; only the first three also echo to the console
LOGGER_FILES = {
    'main': 'main.log',
    'train': 'training.log',
    'eval': 'evaluation.log',
    'data': 'data.log',
    'validation': 'validation.log'
}
CONSOLE_LOGGERS = ('main', 'train', 'eval')


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # Colour a copy so file handlers keep the plain level name
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
        return super().format(record)


class MinimalConsoleFormatter(logging.Formatter):
    """Minimal formatter for essential console output."""

    def format(self, record):
        if record.levelno == logging.INFO:
            return record.getMessage()
        elif record.levelno == logging.WARNING:
            return f"[WARNING] {record.getMessage()}"
        elif record.levelno >= logging.ERROR:
            return f"[ERROR] {record.getMessage()}"
        return record.getMessage()


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: str = 'INFO',
    verbose_console: bool = False
) -> Dict[str, logging.Logger]:
    """
    Setup logging system with multiple loggers.

    Args:
        log_dir: Directory for log files (None = console only)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        verbose_console: If True, show detailed output in console

    Returns:
        Dictionary of loggers for different purposes
    """
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    loggers = {}
    for logger_name, log_filename in LOGGER_FILES.items():
        logger = logging.getLogger(f'{LOGGER_PREFIX}.{logger_name}')
        logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        logger.propagate = False

        # File handler - detailed output
        if log_dir is not None:
            file_handler = logging.FileHandler(
                log_dir / f"{timestamp}_{log_filename}",
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)

        # Console handler - minimal output for main, train, eval
        if logger_name in CONSOLE_LOGGERS:
            console_handler = logging.StreamHandler(sys.stdout)
            if verbose_console:
                console_handler.setLevel(logging.DEBUG)
                console_handler.setFormatter(ColorFormatter(
                    '%(levelname)s | %(message)s'
                ))
            else:
                console_handler.setLevel(logging.INFO)
                console_handler.setFormatter(MinimalConsoleFormatter())
            logger.addHandler(console_handler)

        loggers[logger_name] = logger

    return loggers


def get_logger(name: str = 'main') -> logging.Logger:
    """
    Get a logger by name.

    Args:
        name: Logger name (main, train, eval, data, validation)

    Returns:
        Logger instance
    """
    logger = logging.getLogger(f'{LOGGER_PREFIX}.{name}')
    if not logger.handlers:
        # Logger not set up yet, create a basic one
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(MinimalConsoleFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger


class TrainingLogger:
    """Logger specifically for per-model cross-validation results."""

    CSV_HEADER = "Model,CV Accuracy,CV Std,Fit Seconds,Best Params\n"

    def __init__(self, log_file: Path = None):
        self.logger = get_logger('train')
        self.log_file = Path(log_file) if log_file else None
        self.history = {
            'model': [],
            'cv_accuracy': [],
            'cv_std': [],
            'fit_seconds': []
        }

        # Write CSV header if log file specified
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, 'w') as f:
                f.write(self.CSV_HEADER)

    def log_model(
        self,
        name: str,
        cv_accuracy: float,
        cv_std: float,
        fit_seconds: float,
        best_params: Dict[str, Any]
    ):
        """Log the resampling outcome of one fitted model."""
        self.history['model'].append(name)
        self.history['cv_accuracy'].append(cv_accuracy)
        self.history['cv_std'].append(cv_std)
        self.history['fit_seconds'].append(fit_seconds)

        params_str = ", ".join(f"{k}={v}" for k, v in best_params.items()) or "-"
        self.logger.info(
            f"  {name:8s} | CV Acc: {cv_accuracy * 100:.2f}% (+/- {cv_std * 100:.2f}) | "
            f"{fit_seconds:.1f}s | {params_str}"
        )

        if self.log_file:
            with open(self.log_file, 'a') as f:
                f.write(
                    f"{name},"
                    f"{cv_accuracy:.4f},"
                    f"{cv_std:.4f},"
                    f"{fit_seconds:.2f},"
                    f"\"{params_str}\"\n"
                )

    def get_history(self) -> Dict[str, list]:
        """Get training history."""
        return self.history
