class UserDomainError(Exception):
    """Base exception for identity failures. Ledger failures use LedgerError."""
    default_message = "Identity error."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class AuthenticationError(UserDomainError):
    default_message = "Invalid email or password."


class AccountDeactivatedError(AuthenticationError):
    default_message = "Account disabled."


class InvalidRefreshToken(UserDomainError):
    default_message = "Invalid or expired refresh token."
