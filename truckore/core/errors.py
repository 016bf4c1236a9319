"""Error taxonomy for the storage layer and the identity domain."""


class TruckoreError(Exception):
    """Base class; carries a human-readable message for the calling layer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


# Storage errors


class StorageError(TruckoreError):
    """Raised by a storage backend."""


class BackendUnavailable(StorageError):
    """The native store is unreachable; the selector recovers by falling back."""


class UnsupportedStatement(StorageError):
    """A statement outside the supported subset (or malformed) was submitted."""


class ConstraintViolation(StorageError):
    """A primary-key or unique constraint rejected the write."""

    def __init__(self, message: str, table: str | None = None, column: str | None = None) -> None:
        self.table = table
        self.column = column
        super().__init__(message)


# Domain errors, surfaced verbatim to the caller


class ValidationError(TruckoreError):
    """Input failed validation (username length, password strength)."""


class DuplicateUsername(TruckoreError):
    """Raised when a username is already taken."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username '{username}' already exists")


class UserNotFound(TruckoreError):
    """Raised when an operation names a user id that does not exist."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__("User not found")


class AuthenticationError(TruckoreError):
    """Base class for failed credential verification."""


class InvalidCredentials(AuthenticationError):
    """Unknown username or wrong password; deliberately indistinguishable."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password")


class AccountLocked(AuthenticationError):
    """Account is temporarily locked after repeated failures."""

    def __init__(self, remaining_minutes: int) -> None:
        self.remaining_minutes = remaining_minutes
        plural = "" if remaining_minutes == 1 else "s"
        super().__init__(f"Account locked. Try again in {remaining_minutes} minute{plural}.")


class AccountInactive(AuthenticationError):
    """Account is disabled."""

    def __init__(self) -> None:
        super().__init__("Account is disabled. Contact Super Admin.")


class IncorrectPassword(TruckoreError):
    """Old password did not match during a password change."""

    def __init__(self) -> None:
        super().__init__("Current password is incorrect")


class ProtectedAccount(TruckoreError):
    """Operation would remove the last super_admin."""

    def __init__(self, message: str = "Cannot delete Super Admin account") -> None:
        super().__init__(message)


class SetupAlreadyCompleted(TruckoreError):
    """First-run provisioning was requested after setup finished."""

    def __init__(self) -> None:
        super().__init__("Setup has already been completed")
