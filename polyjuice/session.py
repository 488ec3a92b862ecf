import logging
import time

from .config import PAM_SERVICE
from .errors import AccountInvalid, ContextInitFailed, SessionEnvironmentFailed, SessionOpenFailed

logger = logging.getLogger(__name__)

PAM_SILENT = 0x8000


def _import_pam():
    # Conditional import, and a hook-point for tests to swap in a fake
    import pamela
    return pamela


def _pam_end(pam, handle, retval):
    try:
        pam.pam_end(handle, retval)
    except pam.PAMError as e:
        return str(e)
    return ""


class SessionHandle:
    """An open PAM session; close it (or leave the `with` block) exactly once."""

    def __init__(self, pam, handle, identity, service):
        self._pam = pam
        self._handle = handle
        self.identity = identity
        self.service = service
        self.closed = False

    def environment(self):
        try:
            return dict(self._handle.get_envlist())
        except self._pam.PAMError as e:
            raise SessionEnvironmentFailed(self.identity.username, getattr(e, "errno", None), str(e)) from e

    def close(self):
        if self.closed:
            return
        self.closed = True
        retval = self._pam.PAM_CLOSE_SESSION(self._handle, PAM_SILENT)
        if error := _pam_end(self._pam, self._handle, retval):
            logger.warning(f"closing PAM session failed username={self.identity.username} {retval=} {error=}")
        else:
            logger.info(f"closed PAM session username={self.identity.username}")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class SessionBootstrapper:
    def __init__(self, privilege, *, service=PAM_SERVICE, import_pam=_import_pam):
        self.privilege = privilege
        self.service = service
        self.import_pam = import_pam

    def bootstrap(self, identity):
        self.privilege.require("bootstrap_session")
        username = identity.username

        try:
            pam = self.import_pam()
        except (ImportError, OSError, AttributeError) as e:
            raise ContextInitFailed(username, message=f"PAM library unavailable: {e}") from e

        start_time = time.time()
        try:
            handle = pam.pam_start(self.service, username)
        except pam.PAMError as e:
            raise ContextInitFailed(username, getattr(e, "errno", None), str(e)) from e

        retval = pam.PAM_ACCT_MGMT(handle, PAM_SILENT)
        if retval != 0:
            message = _pam_end(pam, handle, retval)
            logger.warning(f"PAM account validation failed {username=} {retval=} {message=}")
            raise AccountInvalid(username, retval, message)

        retval = pam.PAM_OPEN_SESSION(handle, PAM_SILENT)
        if retval != 0:
            message = _pam_end(pam, handle, retval)
            logger.warning(f"PAM session open failed {username=} {retval=} {message=}")
            raise SessionOpenFailed(username, retval, message)

        logger.info(f"opened PAM session {username=} service={self.service} elapsed={time.time()-start_time:.3f}s")
        return SessionHandle(pam, handle, identity, self.service)


def bootstrap_session(identity, privilege, **kwargs):
    return SessionBootstrapper(privilege, **kwargs).bootstrap(identity)
