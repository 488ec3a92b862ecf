import logging

from .environment import EnvironmentHarvester
from .errors import InsufficientPrivilege, SessionError
from .retry import RetryPolicy
from .session import SessionBootstrapper
from .supervisor import ProcessSupervisor
from .users import lookup_user, supplementary_groups

logger = logging.getLogger(__name__)


def merge_environment(harvested, session_environment):
    """Combine the harvested login environment with PAM session variables.

    The login environment wins: session variables only fill keys the login
    shell did not set.
    """
    merged = dict(session_environment)
    merged.update(harvested)
    for key in [key for key in merged if not key or "=" in key or "\0" in key]:
        logger.warning(f"dropping variable that cannot be exported {key=}")
        del merged[key]
    return merged


def ensure_home(identity, bootstrapper, *, strict=False, retry=None):
    """Bootstrap a PAM session if the home directory is missing.

    Returns the session's environment list (empty when no session was opened).
    The session is closed before returning.
    """
    if identity.home_exists:
        logger.info(f"home directory exists username={identity.username} home={identity.home}")
        return {}

    logger.warning(f"home directory missing, bootstrapping session username={identity.username} home={identity.home}")
    try:
        with bootstrapper.bootstrap(identity) as session:
            session_environment = session.environment()
    except InsufficientPrivilege:
        raise
    except SessionError as e:
        if strict:
            raise
        logger.warning(f"session bootstrap failed, continuing without it username={identity.username} error={e}")
        return {}

    retry = retry or RetryPolicy()
    if retry.wait_for(lambda: identity.home_exists, description=f"home directory {identity.home}"):
        logger.info(f"home directory now exists username={identity.username} home={identity.home}")
    return session_environment


def run_pipeline(username, program, args, privilege, *, use_session=False, strict_session=False, on_line=None,
                 harvester=None, bootstrapper=None, supervisor=None, retry=None, cwd=None):
    identity = lookup_user(username)
    logger.info(f"resolved user username={identity.username} uid={identity.uid} gid={identity.gid} home={identity.home}")

    session_environment = {}
    if use_session:
        bootstrapper = bootstrapper or SessionBootstrapper(privilege)
        session_environment = ensure_home(identity, bootstrapper, strict=strict_session, retry=retry)
    elif not identity.home_exists:
        logger.warning(f"home directory missing username={identity.username} home={identity.home}")

    harvester = harvester or EnvironmentHarvester(privilege)
    environment = merge_environment(harvester.harvest(identity.username), session_environment)

    supervisor = supervisor or ProcessSupervisor()
    return supervisor.run(program, args, identity, environment, on_line,
                          groups=supplementary_groups(identity), cwd=cwd)
