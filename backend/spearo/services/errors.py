"""
Error taxonomy shared by the service layer.

Routes translate these into HTTP responses; anything that is not a
SpearoError is treated as an unclassified failure (500).
"""


class SpearoError(Exception):
    """Base exception for classified service errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(SpearoError):
    """Referenced user or session does not exist"""

    status_code = 404


class ValidationFailedError(SpearoError):
    """Required field missing, range/enum violation, or uniqueness collision"""

    status_code = 422


class AlreadyFollowingError(SpearoError):
    """Actor already has the target in their following list"""

    status_code = 400


class AuthenticationError(SpearoError):
    """Bearer credential missing or rejected by the identity provider"""

    status_code = 401
