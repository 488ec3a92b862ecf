import argparse
import sys

from .errors import PolyjuiceError
from .log import setup_logging
from .pipeline import run_pipeline
from .privilege import Privilege


def error(message):
    print(message, file=sys.stderr)
    sys.exit(1)


def print_line(stream, line):
    print(f"[{stream}] {line}", flush=True)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="polyjuice", description="execute a command as another user with their login environment")
    parser.add_argument("-u", "--username", required=True, help="run command as specified user")
    parser.add_argument("--use-pam-session", action="store_true",
                        help="open a PAM session first if the user's home directory is missing")
    parser.add_argument("--strict-session", action="store_true",
                        help="fail instead of continuing when the PAM session cannot be opened")
    parser.add_argument("--cwd", help="working directory for the command")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command to execute")

    args = parser.parse_args(argv)

    command = args.command[1:] if args.command[:1] == ["--"] else args.command
    if not command:
        parser.print_help()
        sys.exit(1)

    logger = setup_logging("polyjuice")

    try:
        outcome = run_pipeline(
            args.username,
            command[0],
            command[1:],
            Privilege.current(),
            use_session=args.use_pam_session,
            strict_session=args.strict_session,
            on_line=print_line,
            cwd=args.cwd,
        )
    except PolyjuiceError as e:
        error(f"{parser.prog}: {e}")

    logger.info(f"Finished with {outcome}")
    sys.exit(outcome.exit_status)


if __name__ == "__main__":
    main()
