"""Tests for the kubectl port-forward bring-up"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from meshcost.core.exceptions import BringUpError
from meshcost.providers.prometheus import PortForwarder


def fake_process(returncode, output=""):
    proc = MagicMock()
    proc.communicate.return_value = (output, None)
    proc.returncode = returncode
    proc.poll.return_value = returncode
    return proc


class TestPortForwarder:
    """Test PortForwarder"""

    def test_command(self):
        forwarder = PortForwarder(namespace="monitoring", deployment="prom",
                                  local_port=19090, remote_port=9090)
        assert forwarder.command == [
            "kubectl", "-n", "monitoring", "port-forward", "deployment/prom", "19090:9090"
        ]

    def test_clean_exit(self):
        with patch("subprocess.Popen", return_value=fake_process(0)) as mock_popen:
            PortForwarder().run()
        assert mock_popen.call_args[0][0][0] == "kubectl"

    def test_address_in_use_is_transient(self):
        output = "Unable to listen on port 9990: bind: address already in use"
        with patch("subprocess.Popen", return_value=fake_process(1, output)):
            with pytest.raises(BringUpError) as exc_info:
                PortForwarder().run()

        assert exc_info.value.transient
        assert exc_info.value.output == output

    def test_other_failure_is_not_transient(self):
        with patch("subprocess.Popen",
                   return_value=fake_process(1, 'deployments.apps "prometheus" not found')):
            with pytest.raises(BringUpError) as exc_info:
                PortForwarder().run()

        assert not exc_info.value.transient

    def test_missing_kubectl(self):
        with patch("subprocess.Popen", side_effect=FileNotFoundError("kubectl")):
            with pytest.raises(BringUpError, match="cannot run kubectl") as exc_info:
                PortForwarder().run()

        assert not exc_info.value.transient


class TestStop:
    """Test tearing the tunnel down"""

    def test_stop_terminates_running_tunnel(self):
        forwarder = PortForwarder()
        proc = fake_process(-15)
        proc.poll.return_value = None

        def communicate():
            forwarder.stop()
            return "", None

        proc.communicate.side_effect = communicate

        with patch("subprocess.Popen", return_value=proc):
            forwarder.run()

        proc.terminate.assert_called_once()
        proc.wait.assert_called_once_with(timeout=forwarder.stop_timeout)

    def test_stubborn_process_is_killed(self):
        forwarder = PortForwarder(stop_timeout=0.1)
        proc = fake_process(None)
        proc.poll.return_value = None
        proc.wait.side_effect = subprocess.TimeoutExpired(cmd="kubectl", timeout=0.1)
        forwarder._process = proc

        forwarder.stop()

        proc.kill.assert_called_once()

    def test_stop_without_tunnel(self):
        PortForwarder().stop()
