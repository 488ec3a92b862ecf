import grp
import os
import pwd
from pathlib import Path

import pytest

from polyjuice import UserIdentity, UserNotFound, lookup_user, supplementary_groups


def test_lookup_by_name_and_uid():
    entry = pwd.getpwuid(os.getuid())
    by_name = lookup_user(entry.pw_name)

    assert by_name == UserIdentity(entry.pw_name, entry.pw_uid, entry.pw_gid, Path(entry.pw_dir))
    assert lookup_user(entry.pw_uid) == by_name
    assert lookup_user(str(entry.pw_uid)) == by_name


def test_lookup_unknown_user():
    with pytest.raises(UserNotFound) as exc_info:
        lookup_user("polyjuice-no-such-user")
    assert exc_info.value.username == "polyjuice-no-such-user"


def test_supplementary_groups_include_primary_group():
    identity = lookup_user(os.getuid())
    groups = supplementary_groups(identity)

    assert identity.gid in groups
    expected = {group.gr_gid for group in grp.getgrall() if identity.username in group.gr_mem}
    assert set(groups) == expected | {identity.gid}
