import argparse
import logging
import subprocess
import sys
import time

from .errors import PolyjuiceError
from .log import setup_logging
from .privilege import Privilege

logger = logging.getLogger(__name__)


def useradd(*args, run=subprocess.run):
    return run(["useradd", *args], check=True)


def seed_users(privilege, *, count, start_uid, first=0, prefix="user", home_root=None, shell="/bin/bash",
               run=subprocess.run):
    """Create accounts without home directories, so the first run must bootstrap one."""
    privilege.require("seed_users")

    created = []
    for i in range(first, first + count):
        username = f"{prefix}{i}"
        uid = start_uid + i
        args = ["-M", "-s", shell, "-u", str(uid)]
        if home_root:
            args.extend(["-d", f"{home_root.rstrip('/')}/{username}"])
        start_time = time.time()
        useradd(*args, username, run=run)
        logger.info(f"created user {username=} {uid=} {home_root=} elapsed={time.time()-start_time:.3f}s")
        created.append(username)
    return created


def main(argv=None):
    parser = argparse.ArgumentParser(prog="polyjuice-seed-users", description="create test users without home directories")
    parser.add_argument("-n", "--count", type=int, default=10, help="number of users to create")
    parser.add_argument("--first", type=int, default=0, help="index of the first user")
    parser.add_argument("--start-uid", type=int, default=100000, help="uid of index 0")
    parser.add_argument("--prefix", default="user", help="username prefix")
    parser.add_argument("--home-root", help="directory the home directories would live under")
    args = parser.parse_args(argv)

    setup_logging("polyjuice")

    try:
        seed_users(Privilege.current(), count=args.count, start_uid=args.start_uid, first=args.first,
                   prefix=args.prefix, home_root=args.home_root)
    except PolyjuiceError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        sys.exit(1)
    except subprocess.CalledProcessError as e:
        print(f"{parser.prog}: useradd failed with {e.returncode}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
