"""Line-oriented request/response wrapper around a worker sub process.

The worker reads one command per stdin line and answers with any number of
stdout lines followed by a ``READY`` line. It also prints ``READY`` once
after start-up, and exits when it receives ``QUIT``. ``propaccess serve``
implements this contract.

Usage::

    with SubProcess.for_document(Path("catalog.json")) as worker:
        worker.execute("releases.0.title")
"""

from __future__ import annotations

import contextlib
import logging
import os
import platform
import selectors
import shlex
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from .config import SubProcessConfig, get_subprocess_config
from .errors import SubProcessError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import TracebackType

log = logging.getLogger(__name__)


class SubProcess:
    """Send arbitrary commands to one long-lived worker process."""

    def __init__(
        self,
        command: Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        config: SubProcessConfig | None = None,
    ) -> None:
        self._command = list(command)
        self._env = dict(env) if env is not None else None
        self._config = config or get_subprocess_config()
        self._process: subprocess.Popen[str] | None = None

        # launches the worker and drains whatever it printed while starting
        self.execute("")

    @classmethod
    def for_document(
        cls,
        document: Path,
        *,
        env: Mapping[str, str] | None = None,
        config: SubProcessConfig | None = None,
    ) -> SubProcess:
        command = [detect_python_binary(), "-m", "propaccess", "serve", str(document)]
        return cls(command, env=env, config=config)

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def execute(self, command_line: str) -> str:
        """Send ``command_line`` and return the worker's answer."""

        if self._process is not None and self._process.poll() is not None:
            log.info(
                "Worker sub process exited with code %s, relaunching",
                self._process.returncode,
            )
            self._close()
        if self._process is None:
            self._process = self._launch()

        stdin = self._process.stdin
        if stdin is None:
            raise SubProcessError("Worker sub process has no stdin pipe")
        try:
            stdin.write(command_line + "\n")
            stdin.flush()
        except BrokenPipeError as exc:
            raise SubProcessError("Worker sub process closed its input") from exc
        return self._read_response()

    def quit(self) -> None:
        """Cleanly terminate the worker."""

        if self._process is None:
            return
        stdin = self._process.stdin
        if stdin is not None and not stdin.closed:
            # the worker may already be gone
            with contextlib.suppress(BrokenPipeError):
                stdin.write(self._config.quit_command + "\n")
                stdin.flush()
        self._close()

    def __enter__(self) -> SubProcess:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.quit()

    def _launch(self) -> subprocess.Popen[str]:
        environment = {**os.environ, **(self._env or {})}
        log.info("Launching worker sub process: %s", shlex.join(self._command))
        try:
            process = subprocess.Popen(  # noqa: S603
                self._command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                bufsize=1,
                env=environment,
            )
        except OSError as exc:
            raise SubProcessError("Could not execute sub process") from exc

        if process.stdout is not None:
            with selectors.DefaultSelector() as selector:
                selector.register(process.stdout, selectors.EVENT_READ)
                if not selector.select(timeout=self._config.launch_timeout):
                    log.warning(
                        "Worker sub process printed nothing within %.1fs",
                        self._config.launch_timeout,
                    )

        if process.poll() is not None:
            self._close_process(process)
            raise SubProcessError(
                f"Failed launching the worker sub process (exit code {process.returncode})"
            )
        self._process = process
        startup = self._read_response()
        if startup:
            log.debug("Worker start-up output: %s", startup)
        return process

    def _read_response(self) -> str:
        if self._process is None or self._process.stdout is None:
            return ""
        lines: list[str] = []
        for raw_line in iter(self._process.stdout.readline, ""):
            line = raw_line.strip()
            if line == self._config.ready_marker:
                break
            if line:
                lines.append(line)
        return "\n".join(lines)

    def _close(self) -> None:
        if self._process is not None:
            self._close_process(self._process)
            self._process = None

    def _close_process(self, process: subprocess.Popen[str]) -> None:
        for stream in (process.stdin, process.stdout):
            if stream is not None:
                # flushing a pipe to a dead process fails; closing must still happen
                with contextlib.suppress(BrokenPipeError):
                    stream.close()
        try:
            process.wait(timeout=self._config.launch_timeout)
        except subprocess.TimeoutExpired:
            log.warning("Worker sub process did not exit, killing it")
            process.kill()
            process.wait()


def detect_python_binary() -> str:
    """Find a Python executable matching the running interpreter's version."""

    candidates = [sys.executable, "python3", "python"]
    python_path = os.getenv("PYTHON_PATH")
    if python_path:
        candidates.append(str(Path(python_path) / "python"))

    expected = platform.python_version()
    for candidate in candidates:
        if not candidate:
            continue
        try:
            result = subprocess.run(  # noqa: S603
                [candidate, "--version"],
                capture_output=True,
                text=True,
                check=False,
                timeout=10,
            )
        except (OSError, subprocess.TimeoutExpired):
            continue
        output = (result.stdout or result.stderr).strip()
        if not output.startswith("Python "):
            continue
        if output.removeprefix("Python ").strip() == expected:
            return candidate

    attempted = ", ".join(f'"{candidate}"' for candidate in candidates if candidate)
    raise SubProcessError(
        f"Could not find the Python binary matching the current environment. Attempted {attempted}"
    )


__all__ = ["SubProcess", "detect_python_binary"]
