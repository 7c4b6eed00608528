class ServiceError(Exception):
    """A remote model call failed.

    Transport errors, API errors and malformed responses all surface as this
    one type; the original exception is chained as ``__cause__``.
    """
