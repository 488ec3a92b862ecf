import os
from dataclasses import dataclass

from .errors import InsufficientPrivilege


@dataclass(frozen=True)
class Privilege:
    """Capability token for operations that must run as the superuser.

    Obtain one with `Privilege.current()` at startup and hand it to the
    harvester and bootstrapper; tests construct one with any euid.
    """

    euid: int

    @classmethod
    def current(cls):
        return cls(os.geteuid())

    @property
    def superuser(self):
        return self.euid == 0

    def require(self, operation):
        if not self.superuser:
            raise InsufficientPrivilege(operation, self.euid)
        return self
