import grp
import pwd
from dataclasses import dataclass
from pathlib import Path

from .errors import UserNotFound


@dataclass(frozen=True)
class UserIdentity:
    username: str
    uid: int
    gid: int
    home: Path

    @classmethod
    def from_passwd(cls, entry):
        return cls(entry.pw_name, entry.pw_uid, entry.pw_gid, Path(entry.pw_dir))

    @property
    def home_exists(self):
        return self.home.is_dir()


def lookup_user(user):
    try:
        if isinstance(user, int) or str(user).isdigit():
            entry = pwd.getpwuid(int(user))
        else:
            entry = pwd.getpwnam(user)
    except KeyError:
        raise UserNotFound(str(user)) from None
    return UserIdentity.from_passwd(entry)


def supplementary_groups(identity):
    groups = [group.gr_gid for group in grp.getgrall() if identity.username in group.gr_mem]
    if identity.gid not in groups:
        groups.append(identity.gid)
    return groups
