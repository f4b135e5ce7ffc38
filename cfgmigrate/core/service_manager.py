"""Service manager for interacting with systemd via systemctl."""

import subprocess
import logging
from typing import List, Optional, Sequence, Tuple

from ..models.errors import ServiceControlError, ServiceQueryError
from ..models.service import ServiceStatus, ServiceUnit
from ..utils.constants import DEFAULT_COMMAND_TIMEOUT

logger = logging.getLogger(__name__)


class ServiceManager:
    """Manages systemd services via systemctl commands."""

    PAST_TENSE = {"start": "started", "stop": "stopped"}

    def __init__(self, user_scope: bool = False, timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT):
        """Initialize the service manager.

        Args:
            user_scope: True to manage user units (systemctl --user)
            timeout: Seconds to wait for each systemctl call, None to wait forever
        """
        self.user_scope = user_scope
        self.timeout = timeout

    def _base_command(self) -> List[str]:
        cmd = ["systemctl"]
        if self.user_scope:
            cmd.append("--user")
        return cmd

    def list_service_units(self) -> List[ServiceUnit]:
        """List every installed service unit with its unit file state.

        Template units are skipped since they cannot be started or stopped.

        Returns:
            ServiceUnit list in the order systemctl reports them

        Raises:
            ServiceQueryError: If systemctl cannot be queried
        """
        cmd = self._base_command()
        cmd.extend(["list-unit-files", "--type=service", "--no-legend", "--no-pager"])

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True
            )

        except subprocess.TimeoutExpired as e:
            logger.error("Timeout listing service units")
            raise ServiceQueryError("Timeout while listing service units") from e
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else f"exit status {e.returncode}"
            logger.error(f"Failed to list service units: {error_msg}")
            raise ServiceQueryError(f"Failed to list service units: {error_msg}") from e
        except OSError as e:
            logger.error(f"Could not run systemctl: {e}")
            raise ServiceQueryError(f"Could not run systemctl: {e}") from e

        units = []
        for line in result.stdout.splitlines():
            unit = ServiceUnit.from_line(line)
            if unit is None or unit.is_template():
                continue
            units.append(unit)

        logger.debug(f"systemctl reported {len(units)} service units")
        return units

    def get_service_status(self, service_name: str) -> ServiceStatus:
        """Get the current status of a service.

        Args:
            service_name: Name of the systemd service

        Returns:
            ServiceStatus enum value
        """
        cmd = self._base_command()
        cmd.extend(["show", service_name, "--property=ActiveState", "--value"])

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True
            )
            status_str = result.stdout.strip()
            return ServiceStatus.from_string(status_str)

        except subprocess.TimeoutExpired:
            logger.error(f"Timeout getting status for {service_name}")
            return ServiceStatus.UNKNOWN
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to get status for {service_name}: {e.stderr}")
            return ServiceStatus.UNKNOWN
        except OSError as e:
            logger.error(f"Unexpected error getting status for {service_name}: {e}")
            return ServiceStatus.UNKNOWN

    def service_exists(self, service_name: str) -> bool:
        """Check if a service exists.

        Args:
            service_name: Name of the systemd service

        Returns:
            True if service exists, False otherwise
        """
        cmd = self._base_command()
        cmd.extend(["list-unit-files", service_name, "--no-pager", "--no-legend"])

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            return bool(result.stdout.strip())

        except (subprocess.TimeoutExpired, OSError) as e:
            logger.error(f"Error checking if service {service_name} exists: {e}")
            return False

    def start_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Start a systemd service.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._execute_systemctl_action("start", service_name)

    def stop_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Stop a systemd service.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._execute_systemctl_action("stop", service_name)

    def stop_services(self, services: Sequence[str]):
        """Stop services in order, failing fast.

        Args:
            services: Unit names to stop

        Raises:
            ServiceControlError: On the first unit that fails to stop
        """
        for service_name in services:
            success, error_msg = self.stop_service(service_name)
            if not success:
                raise ServiceControlError(
                    f"Failed to stop {service_name}: {error_msg}",
                    unit=service_name,
                    action="stop"
                )

    def start_services(self, services: Sequence[str]):
        """Start services in order.

        Every unit is attempted even if an earlier one fails, so a single bad
        unit never leaves the rest stopped.

        Args:
            services: Unit names to start

        Raises:
            ServiceControlError: If any unit failed to start
        """
        failures = {}
        for service_name in services:
            success, error_msg = self.start_service(service_name)
            if not success:
                failures[service_name] = error_msg

        if failures:
            details = "; ".join(f"{name}: {msg}" for name, msg in failures.items())
            unit = next(iter(failures)) if len(failures) == 1 else None
            raise ServiceControlError(
                f"Failed to start {len(failures)} service(s): {details}",
                unit=unit,
                action="start"
            )

    def _execute_systemctl_action(
        self,
        action: str,
        service_name: str
    ) -> Tuple[bool, Optional[str]]:
        """Execute a systemctl action (start, stop).

        Args:
            action: Systemctl action (start, stop)
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        cmd = self._base_command()
        cmd.extend([action, service_name])

        logger.info(f"Running: {' '.join(cmd)}")

        try:
            subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True
            )
            logger.info(f"Successfully {self.PAST_TENSE.get(action, action)} {service_name}")
            return True, None

        except subprocess.TimeoutExpired:
            error_msg = f"Timeout while trying to {action} {service_name}"
            logger.error(error_msg)
            return False, error_msg

        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else f"Failed to {action} {service_name}"
            logger.error(f"Failed to {action} {service_name}: {error_msg}")
            return False, error_msg

        except OSError as e:
            error_msg = str(e)
            logger.error(f"Unexpected error while trying to {action} {service_name}: {error_msg}")
            return False, error_msg
