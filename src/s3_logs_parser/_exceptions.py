class LogSourceUnavailableError(Exception):
    """Raised when the folder or bucket holding the raw S3 logs cannot be enumerated or read."""
