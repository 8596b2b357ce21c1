"""Run external commands for the local command tools.

The raw command string is split on whitespace and executed directly: there
is no shell, no quoting and no escaping, so an argument containing spaces
cannot be expressed. Standard output and standard error are captured as one
text blob whatever the exit status.

Tool results are text. Output is decoded as UTF-8, so valid UTF-8 comes back
unchanged while bytes that are not valid UTF-8 are replaced with U+FFFD.
"""

import logging
import subprocess
from typing import Optional

from ..errors import CommandExecutionError, EmptyCommand, InvalidCommandPrefix

_log = logging.getLogger(__name__)


def _decode(output: Optional[bytes]) -> str:
    if not output:
        return ""
    return output.decode("utf-8", errors="replace")


class CommandRunner:
    """Execute a whitespace-split command line, optionally prefix-constrained.

    Args:
        prefix: Required first token (e.g. "gcloud"). None accepts any program.
        timeout: Seconds before the process is killed. None waits forever.
        label: Name used in error messages; defaults to the prefix.
    """

    def __init__(
        self,
        prefix: Optional[str] = None,
        timeout: Optional[float] = None,
        label: Optional[str] = None,
    ):
        self.prefix = prefix
        self.timeout = timeout
        self.label = label or prefix or "linux"

    def split(self, raw: str) -> list[str]:
        """Validate the raw command and return its argv."""
        tokens = raw.split()
        if not tokens:
            raise EmptyCommand()
        if self.prefix is not None and tokens[0] != self.prefix:
            raise InvalidCommandPrefix(self.prefix, tokens[0])
        return tokens

    def run(self, raw: str) -> str:
        """Run the command and return its combined output.

        Raises:
            EmptyCommand: the command has no tokens.
            InvalidCommandPrefix: the first token is not the required prefix.
            CommandExecutionError: the process failed to start, exited
                non-zero, or ran past the timeout.
        """
        argv = self.split(raw)
        _log.debug("running %s", argv)

        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandExecutionError(
                self.label,
                f"timed out after {self.timeout}s",
                output=_decode(e.output),
            ) from e
        except OSError as e:
            raise CommandExecutionError(self.label, str(e)) from e

        output = _decode(proc.stdout)
        if proc.returncode != 0:
            raise CommandExecutionError(
                self.label,
                f"exit status {proc.returncode}",
                output=output,
                returncode=proc.returncode,
            )
        return output
