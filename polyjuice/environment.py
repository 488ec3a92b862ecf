import logging
import subprocess
import time

from .config import ENV_COMMAND, NULL_DELIMITED, SU_PATH
from .errors import HelperProcessFailed, HelperProcessUnavailable

logger = logging.getLogger(__name__)


def parse_environment(output, *, null_delimited=False):
    """Parse `KEY=VALUE` records from an environment dump.

    Records are split at the first `=`; records without one are skipped and
    a repeated key keeps its last value. Invalid UTF-8 is replaced rather
    than rejected.

    In the default newline-delimited form a value containing a newline cannot
    be represented: its continuation lines are read as separate records.
    """
    text = output.decode("utf-8", errors="replace")
    records = text.split("\0") if null_delimited else text.split("\n")

    environment = {}
    for record in records:
        if not null_delimited:
            record = record.removesuffix("\r")
        key, separator, value = record.partition("=")
        if not separator:
            continue
        environment[key] = value
    return environment


class EnvironmentHarvester:
    def __init__(self, privilege, *, su=SU_PATH, command=ENV_COMMAND, null_delimited=NULL_DELIMITED,
                 run=subprocess.run):
        self.privilege = privilege
        self.su = su
        self.command = command
        self.null_delimited = null_delimited
        self.run = run

    def helper_command(self, username):
        dump = f"{self.command} -0" if self.null_delimited else self.command
        return [self.su, "-", username, "-c", dump]

    def harvest(self, username):
        self.privilege.require("harvest_environment")

        command = self.helper_command(username)
        start_time = time.time()
        try:
            result = self.run(command, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except OSError as e:
            logger.error(f"environment helper unavailable {command=} {e=}")
            raise HelperProcessUnavailable(command, e) from e

        if result.returncode != 0:
            logger.error(f"environment helper failed {username=} returncode={result.returncode} stderr={result.stderr[:1024]!r}")
            raise HelperProcessFailed(result.returncode, result.stderr)

        environment = parse_environment(result.stdout, null_delimited=self.null_delimited)
        logger.info(f"harvested environment {username=} variables={len(environment)} elapsed={time.time()-start_time:.3f}s")
        return environment


def harvest_environment(username, privilege, **kwargs):
    return EnvironmentHarvester(privilege, **kwargs).harvest(username)
