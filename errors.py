class ProductivityError(Exception):
    """Base class for every failure raised by the productivity stores."""


class ValidationError(ProductivityError):
    def __init__(self, field, message):
        super().__init__(message)
        self.field = field
        self.message = message


class NotFound(ProductivityError):
    pass


class NotAuthorized(NotFound):
    # Raised for rows owned by another workspace. Shares NotFound's message so
    # a caller cannot tell a foreign row from a missing one.
    pass


class StorageError(ProductivityError):
    pass
