import logging
import sys


class Log:
    """Process-wide logger for the receipt pipeline.

    Keyword arguments passed to the log methods are rendered as a trailing
    ``key=value`` list so stage and receipt context survive plain-text sinks.
    """

    _logger: logging.Logger = logging.getLogger("receiptvault")

    @classmethod
    def configure(cls, log_level: str, log_file: str | None = None) -> None:
        """Attach a stdout handler (and optionally a file handler) once."""
        cls._logger.setLevel(log_level.upper())
        if cls._logger.handlers:
            return
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        cls._logger.addHandler(handler)
        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            cls._logger.addHandler(file_handler)
        cls._logger.propagate = False

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(cls._render(message, context))

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(cls._render(message, context))

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(cls._render(message, context))

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(cls._render(message, context))

    @staticmethod
    def _render(message: str, context: dict[str, object]) -> str:
        if not context:
            return message
        suffix = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{message} [{suffix}]"
