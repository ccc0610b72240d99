"""Failure taxonomy for patch operations.

Every error carries a message fit to show the user as-is. The applier turns
them into an ``ApplyResult``; nothing here escapes to the CLI unhandled.
"""


class PatchError(Exception):
    hint = ""

    def __init__(self, message, hint=None):
        super().__init__(message)
        if hint is not None:
            self.hint = hint

    @property
    def user_message(self):
        msg = str(self)
        if self.hint:
            msg = f"{msg} {self.hint}"
        return msg


class TargetNotFound(PatchError):
    """Workbench file is missing. Not retryable."""
    hint = "Reinstall or repair VS Code."


class CorruptionUnrecoverable(PatchError):
    """Workbench file has broken markers and no backup exists."""
    hint = "Reinstall or repair VS Code to restore a clean workbench file."


class InstallFailed(PatchError):
    pass


class LockTimeout(InstallFailed):
    hint = "Another window may be patching; try again in a moment."


class PermissionDenied(InstallFailed):
    hint = "Run VS Code once as administrator, or grant write access to the VS Code install directory."


class WriteFailed(InstallFailed):
    pass
