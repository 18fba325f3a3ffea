import json
import sys
from datetime import datetime
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class Colors:
    """ANSI color codes for console output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    WHITE = '\033[37m'
    BRIGHT_BLACK = '\033[90m'
    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'


class WellnestLogger:
    """Service-tagged console logger with colorized levels and key=value extras"""

    LEVEL_COLORS = {
        LogLevel.DEBUG: Colors.BRIGHT_CYAN,
        LogLevel.INFO: Colors.BRIGHT_BLUE,
        LogLevel.WARNING: Colors.BRIGHT_YELLOW,
        LogLevel.ERROR: Colors.BRIGHT_RED,
        LogLevel.SUCCESS: Colors.BRIGHT_GREEN,
    }

    LEVEL_EMOJIS = {
        LogLevel.DEBUG: "🔍",
        LogLevel.INFO: "ℹ️",
        LogLevel.WARNING: "⚠️",
        LogLevel.ERROR: "❌",
        LogLevel.SUCCESS: "✅",
    }

    def __init__(self, service_name: str = "WELLNEST", enable_colors: bool = True):
        self.service_name = service_name.upper()
        self.enable_colors = enable_colors

    def _colorize(self, text: str, color: str) -> str:
        if not self.enable_colors:
            return text
        return f"{color}{text}{Colors.RESET}"

    def _prefix(self, context: Optional[str]) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        service_context = self.service_name
        if context:
            service_context += f"/{context.upper()}"
        return (
            f"{self._colorize(f'[{timestamp}]', Colors.DIM)} "
            f"{self._colorize(f'[{service_context}]', Colors.BRIGHT_BLACK)}"
        )

    @staticmethod
    def _format_extras(extras: dict) -> str:
        parts = []
        for key, value in extras.items():
            if isinstance(value, (dict, list)):
                value_str = json.dumps(value, default=str, separators=(',', ':'))
                if len(value_str) > 100:
                    value_str = value_str[:100] + "..."
            else:
                value_str = str(value)
            parts.append(f"{key}={value_str}")
        return ", ".join(parts)

    def format_message(self, level: LogLevel, message: str, context: Optional[str] = None, **kwargs) -> str:
        """Format: [TIMESTAMP] [SERVICE/CONTEXT] emoji [LEVEL] message | k=v"""
        emoji = self.LEVEL_EMOJIS.get(level, "")
        level_color = self.LEVEL_COLORS.get(level, Colors.WHITE)
        level_text = self._colorize(f"[{level.value}]", level_color + Colors.BOLD)

        formatted = f"{self._prefix(context)} {emoji} {level_text} {message}"
        if kwargs:
            formatted += self._colorize(f" | {self._format_extras(kwargs)}", Colors.DIM)
        return formatted

    def _log(self, level: LogLevel, message: str, context: Optional[str] = None, **kwargs):
        print(self.format_message(level, message, context, **kwargs), file=sys.stdout)
        sys.stdout.flush()

    def debug(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.ERROR, message, context, **kwargs)

    def success(self, message: str, context: Optional[str] = None, **kwargs):
        self._log(LogLevel.SUCCESS, message, context, **kwargs)


# Global logger instances for different services
weight_logger = WellnestLogger("WEIGHT")
db_logger = WellnestLogger("DATABASE")
auth_logger = WellnestLogger("AUTH")
