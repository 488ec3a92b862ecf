import io
import subprocess
import threading


def completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class FakeRun:
    def __init__(self, result=None, error=None):
        self.result = result or completed()
        self.error = error
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        if self.error:
            raise self.error
        return self.result


class FakePamError(Exception):
    def __init__(self, message="", errno=None):
        self.errno = errno
        super().__init__(message or f"PAM error {errno}")


class FakePamHandle:
    def __init__(self, envlist, envlist_error=None):
        self.envlist = envlist
        self.envlist_error = envlist_error

    def get_envlist(self):
        if self.envlist_error:
            raise self.envlist_error
        return dict(self.envlist)


class FakePam:
    PAMError = FakePamError

    def __init__(self, *, start=0, acct_mgmt=0, open_session=0, close_session=0, envlist=None, envlist_error=None,
                 on_open=None):
        self.start = start
        self.acct_mgmt = acct_mgmt
        self.open_session = open_session
        self.close_session = close_session
        self.on_open = on_open
        self.handle = FakePamHandle(envlist or {}, envlist_error)
        self.calls = []

    @property
    def steps(self):
        return [call[0] for call in self.calls]

    def pam_start(self, service, username):
        self.calls.append(("pam_start", service, username))
        if self.start:
            raise FakePamError("Critical error - immediate abort", errno=self.start)
        return self.handle

    def PAM_ACCT_MGMT(self, handle, flags):
        self.calls.append(("acct_mgmt", flags))
        return self.acct_mgmt

    def PAM_OPEN_SESSION(self, handle, flags):
        self.calls.append(("open_session", flags))
        if not self.open_session and self.on_open:
            self.on_open()
        return self.open_session

    def PAM_CLOSE_SESSION(self, handle, flags):
        self.calls.append(("close_session", flags))
        return self.close_session

    def pam_end(self, handle, retval=0):
        self.calls.append(("pam_end", retval))
        if retval:
            raise FakePamError(errno=retval)


class BrokenPipe(io.BytesIO):
    def readline(self, *args):
        raise OSError(5, "Input/output error")


class FakeProcess:
    def __init__(self, stdout, stderr, returncode=0, pid=4242):
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.pid = pid
        self.killed = False
        self.waited_after_eof = None

    def kill(self):
        self.killed = True
        self.returncode = -9

    def wait(self):
        self.waited_after_eof = self.stdout.closed and self.stderr.closed
        return self.returncode


class OversizedLine(io.BytesIO):
    def readline(self, *args):
        raise MemoryError


def within(timeout, fn, *args, **kwargs):
    result = {}

    def target():
        try:
            result["value"] = fn(*args, **kwargs)
        except BaseException as e:
            result["error"] = e

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    thread.join(timeout)
    assert not thread.is_alive(), f"{fn.__name__} did not finish within {timeout}s"
    if "error" in result:
        raise result["error"]
    return result["value"]
