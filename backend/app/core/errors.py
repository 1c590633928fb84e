"""Exceptions raised by the level generator."""


class ConfigError(ValueError):
    """Generator input rejected before generation starts."""


class GenerationDeadlock(RuntimeError):
    """Assignment did not finish within the iteration cap."""

    def __init__(self, message: str, assigned: int = 0, total: int = 0):
        super().__init__(message)
        self.assigned = assigned
        self.total = total
