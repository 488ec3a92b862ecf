from .environment import EnvironmentHarvester, harvest_environment, parse_environment
from .errors import (
    AccountInvalid,
    ContextInitFailed,
    HarvestError,
    HelperProcessFailed,
    HelperProcessUnavailable,
    InsufficientPrivilege,
    PolyjuiceError,
    RunError,
    SessionEnvironmentFailed,
    SessionError,
    SessionOpenFailed,
    SpawnFailed,
    StreamReadFailed,
    UserNotFound,
)
from .pipeline import ensure_home, merge_environment, run_pipeline
from .privilege import Privilege
from .retry import RetryPolicy
from .session import SessionBootstrapper, SessionHandle, bootstrap_session
from .supervisor import CapturedOutput, ExitOutcome, ProcessSupervisor, run_as_user
from .users import UserIdentity, lookup_user, supplementary_groups
