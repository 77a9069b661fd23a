from __future__ import annotations

from typing import Optional, Sequence


class InstallerError(RuntimeError):
    """Base class for failures that terminate the installer run.

    returncode carries the exit status of the underlying process when one exists;
    the CLI propagates it as its own exit code.
    """

    def __init__(self, message: str, *, returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        if not self.returncode:
            return 1
        rc = int(self.returncode)
        # Killed by signal N: report 128+N like the shell does.
        return 128 - rc if rc < 0 else rc


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.stderr = stderr
        super().__init__(
            f"Command failed ({returncode}): {' '.join(self.argv)}\n{stderr}".rstrip(),
            returncode=returncode,
        )


class PrivilegeError(PermissionError):
    exit_code = 1


class UsageError(ValueError):
    """Bad invocation: unreadable config or state, or an invalid step range."""


class ResourceError(InstallerError):
    pass


class NetworkError(InstallerError):
    pass


class BuildError(InstallerError):
    pass


class ObservableError(InstallerError):
    """Smoke-test failure: reported to the user, never fatal."""
