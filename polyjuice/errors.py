class PolyjuiceError(Exception):
    pass


class HarvestError(PolyjuiceError):
    pass


class SessionError(PolyjuiceError):
    pass


class RunError(PolyjuiceError):
    pass


class InsufficientPrivilege(HarvestError, SessionError):
    def __init__(self, operation, euid):
        self.operation = operation
        self.euid = euid
        super().__init__(f"{operation} requires superuser privileges (euid={euid})")


class UserNotFound(PolyjuiceError):
    def __init__(self, username):
        self.username = username
        super().__init__(f"user {username} does not exist")


class HelperProcessUnavailable(HarvestError):
    def __init__(self, command, error):
        self.command = command
        self.error = error
        super().__init__(f"failed to launch {command[0]}: {error}")


class HelperProcessFailed(HarvestError):
    def __init__(self, returncode, stderr):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"helper exited with {returncode}: {stderr.decode(errors='replace').strip()}")


class PamError(SessionError):
    step = "PAM"

    def __init__(self, username, errno=None, message=""):
        self.username = username
        self.errno = errno
        self.message = message
        super().__init__(f"{self.step} failed for {username}: {message or errno}")


class ContextInitFailed(PamError):
    step = "pam_start"


class AccountInvalid(PamError):
    step = "pam_acct_mgmt"


class SessionOpenFailed(PamError):
    step = "pam_open_session"


class SessionEnvironmentFailed(PamError):
    step = "pam_getenvlist"


class SpawnFailed(RunError):
    def __init__(self, program, error):
        self.program = program
        self.error = error
        super().__init__(f"failed to start {program}: {error}")


class StreamReadFailed(RunError):
    def __init__(self, stream, error, outcome=None):
        self.stream = stream
        self.error = error
        self.outcome = outcome
        super().__init__(f"failed reading {stream}: {error}")
