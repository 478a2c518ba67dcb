"""kubectl access for cluster queries."""

import json
import subprocess
from typing import Any, Dict, List, Optional, Tuple

from ..errors import QueryError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class K8sClient:
    """Runs kubectl against one context and decodes its JSON output."""

    def __init__(self, context: Optional[str] = None, timeout: Optional[float] = None):
        self.context = context
        self.timeout = timeout
        self._verify_kubectl()

    def _verify_kubectl(self):
        """Fail early when kubectl is not installed."""
        try:
            subprocess.run(
                ["kubectl", "version", "--client", "-o", "json"],
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise QueryError("kubectl command not found. Please install kubectl.") from e
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired):
            # queries report their own failures
            logger.warning("kubectl client check failed")
        else:
            logger.debug("kubectl found")

    def _build_command(self, args: List[str], namespace: Optional[str] = None) -> List[str]:
        """Prefix kubectl and its global flags to ``args``."""
        cmd = ["kubectl"]
        if self.context:
            cmd += ["--context", self.context]
        if namespace:
            cmd += ["--namespace", namespace]
        return cmd + list(args)

    def execute(self, args: List[str], namespace: Optional[str] = None) -> Tuple[bool, str]:
        """Run kubectl and return success status and output."""
        cmd = self._build_command(args, namespace)
        logger.debug(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=True, timeout=self.timeout
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"kubectl failed: {e.stderr}")
            return False, e.stderr
        except subprocess.TimeoutExpired:
            logger.error(f"kubectl timed out: {' '.join(args)}")
            return False, f"kubectl timed out after {self.timeout}s"
        return True, result.stdout

    def get_json(
        self,
        resource_type: str,
        name: Optional[str] = None,
        namespace: Optional[str] = None,
        selector: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Fetch one resource, or a list of them, as decoded JSON."""
        args = ["get", resource_type] + ([name] if name else [])
        if selector:
            args += ["--selector", selector]
        args += ["--output", "json"]

        success, output = self.execute(args, namespace)
        if not success:
            raise QueryError(f"Failed to get {resource_type}: {output.strip()}")

        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise QueryError(f"kubectl returned invalid JSON for {resource_type}: {e}") from e
