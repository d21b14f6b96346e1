import json
import logging
import sys
from typing import Optional

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a stdout handler on the root ``wedding_planner`` logger."""
    root = logging.getLogger("wedding_planner")
    if not any(getattr(h, "_wedding_planner", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        handler._wedding_planner = True
        root.addHandler(handler)
    root.setLevel(level.upper())


class ServiceLogger:
    """Service-scoped logger producing ``[SERVICE/CONTEXT] message | key=value`` lines."""

    def __init__(self, service_name: str):
        self.service_name = service_name.upper()
        self._logger = logging.getLogger(f"wedding_planner.{service_name.lower()}")

    def _format_message(self, message: str, context: Optional[str] = None, **kwargs) -> str:
        scope = self.service_name
        if context:
            scope += f"/{context.upper()}"

        line = f"[{scope}] {message}"
        if kwargs:
            extras = []
            for key, value in kwargs.items():
                if isinstance(value, (dict, list)):
                    value_str = json.dumps(value, default=str, separators=(",", ":"))
                    if len(value_str) > 100:
                        value_str = value_str[:100] + "..."
                else:
                    value_str = str(value)
                extras.append(f"{key}={value_str}")
            line += f" | {', '.join(extras)}"
        return line

    def debug(self, message: str, context: Optional[str] = None, **kwargs):
        self._logger.debug(self._format_message(message, context, **kwargs))

    def info(self, message: str, context: Optional[str] = None, **kwargs):
        self._logger.info(self._format_message(message, context, **kwargs))

    def warning(self, message: str, context: Optional[str] = None, **kwargs):
        self._logger.warning(self._format_message(message, context, **kwargs))

    def error(self, message: str, context: Optional[str] = None, **kwargs):
        self._logger.error(self._format_message(message, context, **kwargs))

    def success(self, message: str, context: Optional[str] = None, **kwargs):
        self._logger.log(SUCCESS, self._format_message(message, context, **kwargs))


# Global logger instances for different services
menu_logger = ServiceLogger("MENU")
package_logger = ServiceLogger("PACKAGE")
inventory_logger = ServiceLogger("INVENTORY")
wedding_logger = ServiceLogger("WEDDING")
