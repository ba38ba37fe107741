from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def which(name: str) -> Optional[str]:
    return shutil.which(name)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    capture: bool = True,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False lets the child write straight to the terminal (apt progress).
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    pipe = subprocess.PIPE if capture else None
    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=pipe,
            stderr=pipe,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        if check:
            raise CommandError(argv_list, 127, str(e)) from e
        logger.debug("Not found: %s", argv_list[0])
        return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def run_piped(
    producer: Sequence[str],
    consumer: Sequence[str],
    *,
    dry_run: bool = False,
) -> int:
    """Run `producer | consumer > /dev/null`, returning the producer's exit code.

    stderr of the producer is merged into the pipe, like `2>&1 |` in a shell.
    """

    producer_list = list(producer)
    consumer_list = list(consumer)
    logger.info("CMD %s | %s", _fmt_argv(producer_list), _fmt_argv(consumer_list))

    if dry_run:
        return 0

    src = subprocess.Popen(producer_list, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
    try:
        sink = subprocess.Popen(consumer_list, stdin=src.stdout, stdout=subprocess.DEVNULL)
    except OSError:
        src.kill()
        src.wait()
        raise
    # Let the producer see SIGPIPE if the consumer exits early.
    if src.stdout is not None:
        src.stdout.close()
    sink.wait()
    return src.wait()
