import os
import pwd
from pathlib import Path

import pytest

from polyjuice import Privilege, UserIdentity

#pylint:disable=redefined-outer-name


@pytest.fixture
def superuser():
    return Privilege(euid=0)


@pytest.fixture
def unprivileged():
    return Privilege(euid=1000)


@pytest.fixture
def current_identity():
    entry = pwd.getpwuid(os.getuid())
    return UserIdentity(entry.pw_name, os.getuid(), os.getgid(), Path(entry.pw_dir))


@pytest.fixture
def missing_home_identity(tmp_path):
    return UserIdentity("alice", 100200, 100200, tmp_path / "user-homes" / "alice")
