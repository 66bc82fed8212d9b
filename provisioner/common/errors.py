"""Exceptions raised while provisioning keys and certificates."""


class ProvisioningError(Exception):
    """Base class for every provisioning failure."""


class ConfigError(ProvisioningError):
    """Invalid environment / settings value."""


class ToolchainNotFoundError(ProvisioningError):
    """The openssl executable could not be located."""

    def __init__(self, message: str = "OpenSSL not found. Please install OpenSSL and try again."):
        super().__init__(message)


class CommandError(ProvisioningError):
    """An external toolchain command exited non-zero."""

    def __init__(self, command, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = (stderr or "").strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"{command[0]} {command[1]} failed: {detail}")


class StepError(ProvisioningError):
    """A generation step failed; wraps the underlying cause."""

    def __init__(self, description: str, cause: BaseException):
        self.description = description
        self.cause = cause
        super().__init__(f"Failed to {description}: {cause}")


class VerificationError(ProvisioningError):
    """Generated material does not satisfy its expected properties."""
