import logging
import queue
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Optional

from .errors import SpawnFailed, StreamReadFailed

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"


@dataclass(frozen=True)
class ExitOutcome:
    code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def from_returncode(cls, returncode):
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self):
        return self.code == 0

    @property
    def exit_status(self):
        return self.code if self.signal is None else 128 + self.signal

    def __str__(self):
        if self.signal is not None:
            try:
                name = signal.Signals(self.signal).name
            except ValueError:
                name = "unknown"
            return f"signal {self.signal} ({name})"
        return f"exit code {self.code}"


class CapturedOutput:
    def __init__(self):
        self.stdout = []
        self.stderr = []

    def __call__(self, stream, line):
        getattr(self, stream).append(line)


def _decode_line(raw):
    line = raw.decode("utf-8", errors="replace")
    return line.removesuffix("\n").removesuffix("\r")


def _drain(stream, pipe, lines):
    error = None
    try:
        with pipe:
            for raw in iter(pipe.readline, b""):
                lines.put(("line", stream, _decode_line(raw)))
    except Exception as e:
        error = e
    finally:
        lines.put(("eof", stream, error))


class ChildExecution:
    """A spawned child plus one reader thread per output pipe.

    Each reader owns its pipe and posts `(kind, stream, payload)` records to a
    queue consumed only by the coordinating thread. The child is reaped only
    after both readers have reached end-of-stream.
    """

    def __init__(self, process, program):
        self.process = process
        self.program = program
        self.lines = queue.SimpleQueue()
        self.readers = [
            threading.Thread(target=_drain, args=(stream, pipe, self.lines),
                             name=f"{stream}-{process.pid}", daemon=True)
            for stream, pipe in ((STDOUT, process.stdout), (STDERR, process.stderr))
        ]
        for reader in self.readers:
            reader.start()

    def supervise(self, on_line=None):
        pending = {STDOUT, STDERR}
        errors = []
        try:
            while pending:
                kind, stream, payload = self.lines.get()
                if kind == "line":
                    if on_line:
                        on_line(stream, payload)
                    continue
                pending.discard(stream)
                if payload is not None:
                    logger.error(f"reading child output failed program={self.program} pid={self.process.pid} {stream=} error={payload}")
                    errors.append((stream, payload))
                    self.process.kill()
        except BaseException:
            self.process.kill()
            self.join()
            self.process.wait()
            raise

        self.join()
        outcome = ExitOutcome.from_returncode(self.process.wait())
        if errors:
            stream, error = errors[0]
            raise StreamReadFailed(stream, error, outcome)
        return outcome

    def join(self):
        for reader in self.readers:
            reader.join()


class ProcessSupervisor:
    def __init__(self, *, popen=subprocess.Popen):
        self.popen = popen

    def spawn(self, program, args, identity, environment, *, groups=None, cwd=None):
        command = [program, *args]
        try:
            process = self.popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=dict(environment),
                user=identity.uid,
                group=identity.gid,
                extra_groups=groups,
                cwd=cwd,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            logger.error(f"spawn failed {command=} uid={identity.uid} gid={identity.gid} {e=}")
            raise SpawnFailed(program, e) from e
        logger.info(f"spawned {program=} pid={process.pid} username={identity.username} uid={identity.uid} gid={identity.gid}")
        return ChildExecution(process, program)

    def run(self, program, args, identity, environment, on_line=None, **kwargs):
        start_time = time.time()
        execution = self.spawn(program, args, identity, environment, **kwargs)
        outcome = execution.supervise(on_line)
        logger.info(f"finished {program=} pid={execution.process.pid} outcome={outcome} elapsed={time.time()-start_time:.3f}s")
        return outcome


def run_as_user(program, args, identity, environment, on_line=None, **kwargs):
    return ProcessSupervisor().run(program, args, identity, environment, on_line, **kwargs)
