import logging

from flask import Flask

from .errors import PolyjuiceError
from .log import setup_logging
from .pipeline import ensure_home
from .privilege import Privilege
from .session import SessionBootstrapper
from .users import lookup_user

logger = logging.getLogger(__name__)


def create_app(privilege=None, bootstrapper=None, retry=None):
    setup_logging("polyjuice")
    app = Flask(__name__)
    privilege = privilege or Privilege.current()
    bootstrapper = bootstrapper or SessionBootstrapper(privilege)

    @app.route("/init/<username>", methods=["POST"])
    def init(username):
        try:
            privilege.require("init")
            identity = lookup_user(username)
            existed = identity.home_exists
            if not existed:
                ensure_home(identity, bootstrapper, strict=True, retry=retry)
        except PolyjuiceError as e:
            logger.error(f"init failed {username=} error={e}")
            return {"success": False, "error": str(e)}

        return {"success": True, "created": not existed and identity.home_exists}

    return app
