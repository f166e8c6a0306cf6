from logging import Logger

__all__ = [
    "HintedError",
]


class HintedError(ValueError):
    """Invalid input, with a hint on how to fix it for the person running the caller."""

    def __init__(self, error_str: str, hint_msg: str):
        self._error_str = error_str
        self._hint_msg = hint_msg
        super().__init__(error_str)

    @property
    def hint(self) -> str:
        return self._hint_msg

    def log_error(self, logger: Logger) -> None:
        logger.critical(self._error_str)
        logger.critical(self._hint_msg)
