class ProjectionLoaderError(Exception):
    """Base class for every error raised by the projection loader."""
    pass


class NoDataError(ProjectionLoaderError):
    """Raised when the source database returns no producer/orchard/fruit rows."""
    pass


class DatabaseConnectionError(ProjectionLoaderError):
    """Raised when credentials cannot be resolved or a database cannot be reached."""
    pass


class NotificationError(ProjectionLoaderError):
    """Raised when the summary e-mail cannot be sent."""
    pass


class MalformedCodeError(ProjectionLoaderError):
    """Raised when a producer-orchard code is not in the PRODUCER-ORCHARDID form."""
    pass


class ForecastRequestError(ProjectionLoaderError):
    """Raised on transport failure, non-2xx status or malformed forecast payload."""
    pass


class DuplicateProjectionError(ProjectionLoaderError):
    """Raised when a projection for the same date, producer, orchard and fruit already exists."""
    pass


class InsertError(ProjectionLoaderError):
    """Raised when a projection or one of its detail rows cannot be written."""
    pass
