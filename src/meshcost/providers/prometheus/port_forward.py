import logging
import subprocess
from typing import List, Optional

from ...core.exceptions import BringUpError

logger = logging.getLogger(__name__)

ADDRESS_IN_USE = "address already in use"


class PortForwarder:
    """Tunnels a local port to the in-cluster Prometheus deployment with kubectl.

    ``run()`` blocks for as long as the tunnel is up, so it is meant to be
    handed to the readiness gate, which runs it on its own thread.
    ``stop()`` tears the tunnel down from any other thread.
    """

    def __init__(self, namespace: str = "istio-system", deployment: str = "prometheus",
                 local_port: int = 9990, remote_port: int = 9090,
                 kubectl: str = "kubectl", stop_timeout: float = 5.0):
        self.namespace = namespace
        self.deployment = deployment
        self.local_port = local_port
        self.remote_port = remote_port
        self.kubectl = kubectl
        self.stop_timeout = stop_timeout
        self._process: Optional[subprocess.Popen] = None
        self._stopping = False

    @property
    def command(self) -> List[str]:
        return [
            self.kubectl, "-n", self.namespace, "port-forward",
            f"deployment/{self.deployment}", f"{self.local_port}:{self.remote_port}",
        ]

    def run(self) -> None:
        logger.info(
            f"Port-forwarding deployment/{self.deployment} in {self.namespace} "
            f"to localhost:{self.local_port}"
        )
        self._stopping = False
        try:
            proc = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise BringUpError(f"cannot run {self.kubectl}: {e}") from e

        self._process = proc
        try:
            output, _ = proc.communicate()
        finally:
            self._process = None

        if self._stopping:
            logger.debug(f"Port-forward to deployment/{self.deployment} stopped")
            return

        if proc.returncode != 0:
            output = output or ""
            raise BringUpError(
                f"cannot port-forward to prometheus (exit {proc.returncode})",
                output=output,
                transient=ADDRESS_IN_USE in output,
            )

    def stop(self) -> None:
        """Terminate a running tunnel; a no-op when none is up"""
        self._stopping = True
        proc = self._process
        if proc is None or proc.poll() is not None:
            return

        logger.info(f"Stopping port-forward to deployment/{self.deployment}")
        proc.terminate()
        try:
            proc.wait(timeout=self.stop_timeout)
        except subprocess.TimeoutExpired:
            logger.warning(f"{self.kubectl} did not exit, killing it")
            proc.kill()
