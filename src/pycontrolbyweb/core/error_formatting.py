"""
Error formatting and logging utilities.

Turns ControlByWebError instances (and stray Python exceptions) into text
for the command line, structured dictionaries for a presentation layer,
and log records.
"""

import json
import logging
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Union

from pycontrolbyweb.core.errors import ControlByWebError, is_usage_error


class ErrorFormatter:
    """Formats errors for consistent presentation."""

    COLORS = {
        'RED': '\033[91m',
        'YELLOW': '\033[93m',
        'RESET': '\033[0m'
    }

    def __init__(self, use_colors: bool = False):
        self.use_colors = use_colors

    def format_for_user(self, error: Exception) -> str:
        """Format error for end-user display, without technical details."""
        if isinstance(error, ControlByWebError):
            return error.format_user_message()
        return f"An error occurred: {error}"

    def format_for_log(self, error: Exception, include_trace: bool = True) -> str:
        """Format error for technical logging."""
        if isinstance(error, ControlByWebError):
            return error.format_log_message()
        msg = f"{error.__class__.__name__}: {error}"
        if include_trace:
            msg += f"\nStack trace:\n{traceback.format_exc()}"
        return msg

    def format_for_display(self, error: Exception) -> Dict[str, Any]:
        """
        Format error as structured data for a status bar or dialog.

        Returns:
            Dictionary with title, message, code, suggestions, details and severity
        """
        if isinstance(error, ControlByWebError):
            return {
                'title': error.__class__.__name__.replace('Error', ' Error'),
                'message': error.message,
                'code': error.error_code,
                'suggestions': error.suggestions,
                'details': error.context if error.context else None,
                'severity': self._get_severity(error)
            }
        return {
            'title': 'Error',
            'message': str(error),
            'code': 9000,
            'suggestions': [],
            'details': {'type': error.__class__.__name__},
            'severity': 'error'
        }

    def format_for_json(self, error: Exception) -> str:
        """Format error as a JSON document."""
        if isinstance(error, ControlByWebError):
            data = error.to_dict()
        else:
            data = {
                'error_type': error.__class__.__name__,
                'message': str(error),
                'timestamp': datetime.now().isoformat()
            }
        return json.dumps(data, indent=2, default=str)

    def _get_severity(self, error: ControlByWebError) -> str:
        if is_usage_error(error):
            return 'error'
        if error.error_code < 2000:
            return 'critical'
        if error.error_code < 3000:
            return 'error'
        return 'warning'

    def colorize(self, text: str, color: str) -> str:
        """Add ANSI color codes to text if colors are enabled."""
        if self.use_colors and color in self.COLORS:
            return f"{self.COLORS[color]}{text}{self.COLORS['RESET']}"
        return text


class ErrorLogger:
    """
    Centralized error logging with consistent formatting.

    Logs a user-facing line at the requested level and the technical
    details at DEBUG. Handlers are only attached when asked for, so by
    default records propagate to whatever the application configured.
    """

    def __init__(
        self,
        logger_name: str = 'pycontrolbyweb.errors',
        log_file: Optional[Path] = None,
        console_level: Optional[int] = None,
        file_level: int = logging.DEBUG
    ):
        """
        Initialize error logger.

        Args:
            logger_name: Name for the logger instance
            log_file: Optional path to error log file
            console_level: Attach a console handler at this level
            file_level: Logging level for file output
        """
        self.logger = logging.getLogger(logger_name)
        self.formatter = ErrorFormatter()

        if not self.logger.handlers:
            if console_level is not None:
                console_handler = logging.StreamHandler()
                console_handler.setLevel(console_level)
                console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))
                self.logger.addHandler(console_handler)

            if log_file:
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(file_level)
                file_handler.setFormatter(logging.Formatter(
                    '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
                ))
                self.logger.addHandler(file_handler)

    def log_error(
        self,
        error: Exception,
        level: int = logging.ERROR,
        include_trace: bool = True,
        extra_context: Optional[Dict[str, Any]] = None
    ):
        """
        Log an error with appropriate formatting.

        Args:
            error: The error to log
            level: Logging level
            include_trace: Whether to include stack trace
            extra_context: Additional context to include
        """
        context = {}
        if isinstance(error, ControlByWebError) and error.context:
            context.update(error.context)
        if extra_context:
            context.update(extra_context)

        if isinstance(error, ControlByWebError):
            self.logger.log(level, self.formatter.format_for_user(error))
            self.logger.debug(self.formatter.format_for_log(error, include_trace))
            if context:
                self.logger.debug(f"Error context: {json.dumps(context, indent=2, default=str)}")
        else:
            self.logger.log(level, self.formatter.format_for_log(error, include_trace))


def format_error(error: Exception, format_type: str = 'user') -> Union[str, Dict]:
    """
    Format an error.

    Args:
        error: The error to format
        format_type: One of 'user', 'log', 'display', or 'json'

    Returns:
        Formatted error based on type
    """
    formatter = ErrorFormatter()

    if format_type == 'user':
        return formatter.format_for_user(error)
    elif format_type == 'log':
        return formatter.format_for_log(error)
    elif format_type == 'display':
        return formatter.format_for_display(error)
    elif format_type == 'json':
        return formatter.format_for_json(error)
    else:
        raise ValueError(f"Unknown format type: {format_type}")
