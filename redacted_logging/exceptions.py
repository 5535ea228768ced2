"""Exception types raised by the structured logging library."""


class LoggingError(Exception):
    pass


class LoggingConfigError(LoggingError, ValueError):
    pass


class RedactionConfigError(LoggingConfigError):
    pass
