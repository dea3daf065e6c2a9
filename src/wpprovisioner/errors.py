"""Domain errors for wpprovisioner."""


class ProvisionerError(RuntimeError):
    """Raised when provisioning cannot continue safely."""


class PrivilegeError(ProvisionerError):
    """Raised when the process lacks superuser rights."""


class StepExecutionError(ProvisionerError):
    """Raised when a provisioning step or one of its commands fails."""

    def __init__(self, message: str, step: str = None):
        super().__init__(message)
        self.step = step


class VerificationError(ProvisionerError):
    """Raised when the stack is not healthy after provisioning."""

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report
