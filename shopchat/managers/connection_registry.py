import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from shopchat.exceptions import (
    ConnectionNotFoundError,
    IdentityError,
    IdentityInactiveError,
    IdentityNotFoundError,
    RegistryError,
)
from shopchat.logging import logger
from shopchat.protocols import ConnectionHandle, IdentityVerifier
from shopchat.schemas.device import DeviceClass
from shopchat.utils.metrics import (
    registry_connections_registered,
    registry_evictions_total,
    registry_registration_duration_seconds,
    registry_registrations_total,
)


@dataclass(frozen=True)
class ConnectionRecord:
    """
    One live connection bound to an identity and a device class.

    ``display_name`` is captured at registration time and is not refreshed
    when the user is later renamed.
    """

    connection_id: str
    user_id: str
    display_name: str
    device_class: DeviceClass
    handle: ConnectionHandle = field(compare=False, repr=False)

    @property
    def key(self) -> tuple[str, DeviceClass]:
        return self.user_id, self.device_class


@dataclass(frozen=True)
class RegistrationResult:
    """
    Outcome of ConnectionRegistry.register.

    Exactly one of ``record`` and ``error`` is set. On failure the caller
    owns the connection and must terminate it.
    """

    record: ConnectionRecord | None = None
    error: RegistryError | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def success(cls, record: ConnectionRecord) -> "RegistrationResult":
        return cls(record=record)

    @classmethod
    def failure(cls, error: RegistryError) -> "RegistrationResult":
        return cls(error=error)


def _failure_outcome(error: IdentityError) -> str:
    if isinstance(error, IdentityNotFoundError):
        return "not_found"
    if isinstance(error, IdentityInactiveError):
        return "inactive"
    return "lookup_error"


class ConnectionRegistry:
    """
    Registry of live connections keyed by connection id.

    Enforces that a user holds at most one registered connection per device
    class: registering a new connection evicts (terminates and removes) any
    existing connection for the same user and device class.

    Eviction and insert for the same resolved (user, device class) pair are
    serialized, so two concurrent registrations cannot both pass the
    eviction scan before either inserts.
    """

    def __init__(self, identity_verifier: IdentityVerifier) -> None:
        """
        Args:
            identity_verifier: Collaborator resolving claimed user ids to
                active identities, queried on every registration.
        """
        self.identity_verifier = identity_verifier
        self._records: dict[str, ConnectionRecord] = {}
        self._locks: dict[tuple[str, DeviceClass], asyncio.Lock] = {}
        self._lock_users: Counter[tuple[str, DeviceClass]] = Counter()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._records

    async def register(
        self,
        handle: ConnectionHandle,
        claimed_user_id: str,
        device_class: DeviceClass,
    ) -> RegistrationResult:
        """
        Register a connection for a user on a device class.

        Steps:
        1. Resolve the claimed user through the identity verifier.
        2. Evict every existing record of the same resolved user and device
           class: terminate its transport, then drop the record.
        3. Insert the new record.

        Steps 2 and 3 run under the lock of the resolved (user, device
        class) pair.

        The registry never terminates ``handle`` itself. When the returned
        result is a failure the caller must close the connection.

        Args:
            handle: Capability over the new connection.
            claimed_user_id: User id taken from the verified credential.
            device_class: Device class of the new connection.

        Returns:
            RegistrationResult: The stored record, or the identity error
            that prevented registration.
        """
        with registry_registration_duration_seconds.time():
            try:
                identity = await self.identity_verifier.resolve_active_identity(
                    claimed_user_id
                )
            except IdentityError as ex:
                logger.error(f"Error registering connection {handle.id}: {ex}")
                registry_registrations_total.labels(
                    outcome=_failure_outcome(ex)
                ).inc()
                return RegistrationResult.failure(ex)

            record = ConnectionRecord(
                connection_id=handle.id,
                user_id=identity.id,
                display_name=identity.display_name,
                device_class=device_class,
                handle=handle,
            )

            # Keyed by the resolved id: claims may spell one user differently
            async with self._key_lock(record.key):
                await self._evict_conflicting(record)

                self._records[record.connection_id] = record
                registry_connections_registered.set(len(self._records))

        registry_registrations_total.labels(outcome="registered").inc()
        logger.debug(
            f"Registered connection {record.connection_id} for user "
            f"{record.user_id} on {record.device_class}"
        )
        return RegistrationResult.success(record)

    @asynccontextmanager
    async def _key_lock(
        self, key: tuple[str, DeviceClass]
    ) -> AsyncIterator[None]:
        """
        Hold the lock of one (user, device class) pair.

        The lock is dropped from the map once no task holds or waits on it.
        """
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def _evict_conflicting(self, candidate: ConnectionRecord) -> None:
        """
        Terminate and remove records sharing the candidate's key.

        Scans a snapshot of the whole mapping; termination failures are
        logged and the record is removed regardless.
        """
        for connection_id, existing in list(self._records.items()):
            if existing.key != candidate.key:
                continue
            if connection_id == candidate.connection_id:
                continue

            logger.info(
                f"Disconnecting existing connection {connection_id} for user "
                f"{existing.user_id} on device type {existing.device_class}"
            )
            try:
                await existing.handle.terminate()
            except Exception as ex:
                # Record is dropped even when the transport refuses to close
                logger.warning(
                    f"Failed to terminate evicted connection {connection_id}: {ex}"
                )

            self._records.pop(connection_id, None)
            registry_evictions_total.labels(
                device_class=existing.device_class.value
            ).inc()

        registry_connections_registered.set(len(self._records))

    def remove(self, connection_id: str) -> None:
        """
        Remove a connection record.

        Removing an unknown connection id is a no-op.

        Args:
            connection_id: The connection to forget.
        """
        record = self._records.pop(connection_id, None)
        if record is None:
            return

        registry_connections_registered.set(len(self._records))
        logger.debug(
            f"Removed connection {connection_id} of user {record.user_id}"
        )

    def list_connection_ids(self) -> list[str]:
        """
        Get the roster of registered connection ids.

        Returns:
            list[str]: Connection ids in registration order.
        """
        return list(self._records)

    def get_record(self, connection_id: str) -> ConnectionRecord | None:
        return self._records.get(connection_id)

    def lookup_display_name(self, connection_id: str) -> str:
        """
        Get the display name captured when a connection registered.

        Args:
            connection_id: A registered connection id.

        Returns:
            str: The owner's display name at registration time.

        Raises:
            ConnectionNotFoundError: If the connection is not registered.
        """
        try:
            return self._records[connection_id].display_name
        except KeyError:
            raise ConnectionNotFoundError(connection_id) from None
