import os


SU_PATH = os.environ.get("POLYJUICE_SU", "su")
ENV_COMMAND = os.environ.get("POLYJUICE_ENV_COMMAND", "printenv")
NULL_DELIMITED = os.environ.get("POLYJUICE_NULL_DELIMITED", "0") not in ("", "0", "false", "no")

PAM_SERVICE = os.environ.get("POLYJUICE_PAM_SERVICE", "polyjuice")

HOME_ATTEMPTS = int(os.environ.get("POLYJUICE_HOME_ATTEMPTS", "10"))
HOME_INTERVAL = float(os.environ.get("POLYJUICE_HOME_INTERVAL", "0.5"))

LOG_LEVEL = os.environ.get("POLYJUICE_LOG_LEVEL", "INFO").upper()
