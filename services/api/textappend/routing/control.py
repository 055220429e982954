"""Routing control plane: the on/off switch for public reachability.

The append path only ever disables access, one way. Re-enabling is an
operator action (see ``textappend.ops``). Switches with
``enforced_upstream = False`` live beside the service, so the API itself
checks them on every request; an API Gateway stage is enforced by the
gateway before a request ever arrives.
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError

from textappend.exceptions import RoutingError

logger = logging.getLogger(__name__)


@runtime_checkable
class RoutingControlPlane(Protocol):
    """Protocol for public routing control implementations."""

    enforced_upstream: bool

    def disable_public_access(self) -> None:
        """Take the public surface offline. Idempotent. Raises RoutingError."""
        ...

    def enable_public_access(self) -> None:
        """Bring the public surface back. Idempotent. Raises RoutingError."""
        ...

    def is_public_access_enabled(self) -> bool:
        """Return True if the public surface is reachable."""
        ...


class InMemoryRoutingControlPlane:
    """In-memory switch for testing and local runs.

    Not suitable for production where the switch lives outside the process.
    """

    enforced_upstream = False

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._lock = threading.Lock()
        self.disable_calls = 0
        self.enable_calls = 0

    def disable_public_access(self) -> None:
        with self._lock:
            self.disable_calls += 1
            self._enabled = False

    def enable_public_access(self) -> None:
        with self._lock:
            self.enable_calls += 1
            self._enabled = True

    def is_public_access_enabled(self) -> bool:
        return self._enabled


class FileRoutingControlPlane:
    """Switch kept as a marker file shared by the server and the operator CLI.

    Public access is disabled while the marker exists.
    """

    enforced_upstream = False

    def __init__(self, flag_path: Path) -> None:
        self._flag_path = Path(flag_path)

    def disable_public_access(self) -> None:
        try:
            self._flag_path.parent.mkdir(parents=True, exist_ok=True)
            self._flag_path.write_text(
                f"disabled at {datetime.now(timezone.utc).isoformat()}\n"
            )
        except OSError as e:
            raise RoutingError(f"write {self._flag_path} failed: {e}") from e
        logger.warning("Public access disabled via %s", self._flag_path)

    def enable_public_access(self) -> None:
        try:
            self._flag_path.unlink(missing_ok=True)
        except OSError as e:
            raise RoutingError(f"remove {self._flag_path} failed: {e}") from e
        logger.info("Public access enabled, removed %s", self._flag_path)

    def is_public_access_enabled(self) -> bool:
        return not self._flag_path.exists()


class ApiGatewayRoutingControlPlane:
    """Switch backed by an API Gateway v2 stage.

    Disabling deletes the stage, which makes every route unreachable.
    Enabling recreates it with auto-deploy so the latest deployment is served.
    """

    enforced_upstream = True

    def __init__(self, client: Any, api_id: str, stage_name: str = "$default") -> None:
        """Initialize with an apigatewayv2 client.

        Args:
            client: A boto3 ``apigatewayv2`` client (configured with timeouts).
            api_id: HTTP API id.
            stage_name: Stage serving the public routes.
        """
        self._client = client
        self._api_id = api_id
        self._stage_name = stage_name

    @staticmethod
    def _code(error: ClientError) -> str:
        return str(error.response.get("Error", {}).get("Code", ""))

    def disable_public_access(self) -> None:
        try:
            self._client.delete_stage(ApiId=self._api_id, StageName=self._stage_name)
        except ClientError as e:
            if self._code(e) == "NotFoundException":
                logger.info("Stage %s already deleted", self._stage_name)
                return
            raise RoutingError(f"delete_stage {self._stage_name} failed: {e}") from e
        except BotoCoreError as e:
            raise RoutingError(f"delete_stage {self._stage_name} failed: {e}") from e
        logger.warning("Deleted API stage %s on API %s", self._stage_name, self._api_id)

    def enable_public_access(self) -> None:
        try:
            self._client.create_stage(
                ApiId=self._api_id,
                StageName=self._stage_name,
                AutoDeploy=True,
            )
        except ClientError as e:
            if self._code(e) == "ConflictException":
                logger.info("Stage %s already exists", self._stage_name)
                return
            raise RoutingError(f"create_stage {self._stage_name} failed: {e}") from e
        except BotoCoreError as e:
            raise RoutingError(f"create_stage {self._stage_name} failed: {e}") from e
        logger.info("Created API stage %s on API %s", self._stage_name, self._api_id)

    def is_public_access_enabled(self) -> bool:
        try:
            self._client.get_stage(ApiId=self._api_id, StageName=self._stage_name)
        except ClientError as e:
            if self._code(e) == "NotFoundException":
                return False
            raise RoutingError(f"get_stage {self._stage_name} failed: {e}") from e
        except BotoCoreError as e:
            raise RoutingError(f"get_stage {self._stage_name} failed: {e}") from e
        return True
