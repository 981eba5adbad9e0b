"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class GoalNotFoundError(DomainException):
    """No goal with the given id exists for the user"""

    pass


class InvalidSignatureError(DomainException):
    """Gateway callback signature does not match the expected digest"""

    pass


class AuthenticationError(DomainException):
    """Credentials or access token were rejected"""

    pass


class DuplicateUserError(DomainException):
    """Mobile number or email already belongs to another account"""

    pass
