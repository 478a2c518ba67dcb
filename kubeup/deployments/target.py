"""Remote node handle reached over SSH."""

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import MutationError, TargetIOError
from ..model.deployment import MutationStep
from ..utils.logger import get_logger
from .actions import ACTION_HANDLERS

logger = get_logger(__name__)


class Target:
    """A node that receives files and remote actions.

    ``nodename`` is unknown until the coordinator resolves the node's
    identity against the cluster.
    """

    def __init__(
        self,
        target: str,
        user: str = "root",
        port: int = 22,
        sudo: bool = False,
        identity_file: Optional[Path] = None,
        timeout: Optional[float] = None,
    ):
        self.target = target
        self.user = user
        self.port = port
        self.sudo = sudo
        self.identity_file = identity_file
        self.timeout = timeout
        self.nodename: Optional[str] = None

    def __str__(self) -> str:
        if self.nodename:
            return f"{self.nodename} ({self.target})"
        return self.target

    def _build_command(self, command: str) -> List[str]:
        """Build ssh command line for a remote shell command."""
        cmd = ["ssh", "-o", "BatchMode=yes", "-p", str(self.port)]

        if self.identity_file:
            cmd.extend(["-i", str(self.identity_file)])

        cmd.append(f"{self.user}@{self.target}")

        if self.sudo:
            command = f"sudo sh -c {shlex.quote(command)}"
        cmd.append(command)

        return cmd

    def execute(self, command: str, stdin: Optional[str] = None) -> Tuple[bool, str]:
        """Run a shell command on the node and return success status and output."""
        cmd = self._build_command(command)
        logger.debug(f"[{self.target}] Executing: {command}")

        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
            return True, result.stdout
        except subprocess.CalledProcessError as e:
            logger.error(f"[{self.target}] Command failed: {e.stderr}")
            return False, e.stderr
        except subprocess.TimeoutExpired:
            logger.error(f"[{self.target}] Command timed out: {command}")
            return False, f"command timed out after {self.timeout}s"
        except FileNotFoundError:
            return False, "ssh command not found"

    def download_file_contents(self, path: str) -> str:
        """Read a file from the node."""
        success, output = self.execute(f"cat {shlex.quote(path)}")
        if not success:
            raise TargetIOError(f"Failed to read {path} from {self.target}: {output.strip()}")
        return output

    def upload_file_contents(self, path: str, contents: str) -> None:
        """Write a file on the node."""
        success, output = self.execute(f"cat > {shlex.quote(path)}", stdin=contents)
        if not success:
            raise TargetIOError(f"Failed to write {path} on {self.target}: {output.strip()}")

    def apply(self, step: MutationStep) -> None:
        """Run a named remote action on the node."""
        handler = ACTION_HANDLERS.get(step.action)
        if handler is None:
            raise MutationError(step.action, "unknown action")

        logger.info(f"[{self}] Applying {step}")
        handler(self, step)
