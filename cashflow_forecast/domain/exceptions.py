"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ForecastValidationError(DomainException):
    """Forecast input rejected before any computation starts"""

    pass


class InvalidRuleError(ForecastValidationError):
    """Payment rule has an unknown frequency or malformed anchor days"""

    pass


class InvalidWindowError(ForecastValidationError):
    """Date window is empty, inverted, or too large"""

    pass


class DataAccessError(DomainException):
    """A collaborator store could not be read"""

    pass
