"""In-memory backend clients for testing.

Protocol-based test doubles for ObjectStorageClient and IdentityAdminClient,
a client factory that hands them out, and a bucket metadata store. The
clients keep state in dicts, record every call, and can be told to fail a
given operation with a given ErrorKind.

Usage:
    from bucket_provisioner.infra.storage.testing import InMemoryClientFactory

    factory = InMemoryClientFactory()
    factory.storage.add_bucket("b1")
    async with factory.build("http://rgw", "ak", "sk") as clients:
        await clients.admin.create_user("alice")

    factory.storage.fail("put_bucket_policy", ErrorKind.INTERNAL)
    assert factory.calls == [...]

Pattern: Protocol-based test double (no mocking library needed)
"""

from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from bucket_provisioner.infra.storage.backends.factory import BackendClients
from bucket_provisioner.infra.storage.backends.protocol import (
    Account,
    AccountKey,
    subuser_id,
)
from bucket_provisioner.infra.storage.exceptions import ErrorKind, ProvisioningError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from bucket_provisioner.infra.storage.policy import PolicyDocument


class _FaultInjector:
    """Shared call log and one-shot failure injection."""

    def __init__(self, calls: list[tuple[str, tuple[Any, ...]]]) -> None:
        self.calls = calls
        self._faults: dict[str, ErrorKind] = {}

    def fail(self, operation: str, kind: ErrorKind = ErrorKind.INTERNAL) -> None:
        """Make the next call of ``operation`` raise a ProvisioningError of ``kind``."""
        self._faults[operation] = kind

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        kind = self._faults.pop(operation, None)
        if kind is not None:
            raise ProvisioningError(
                kind,
                f"{operation} failed: injected",
                metadata={"operation": operation},
            )


class InMemoryObjectStorage(_FaultInjector):
    """ObjectStorageClient backed by dicts."""

    def __init__(self, calls: list[tuple[str, tuple[Any, ...]]] | None = None) -> None:
        super().__init__(calls if calls is not None else [])
        self.buckets: set[str] = set()
        self.policies: dict[str, PolicyDocument] = {}
        self.non_empty: set[str] = set()

    def add_bucket(self, bucket: str, policy: PolicyDocument | None = None) -> None:
        """Seed a bucket, optionally with a policy."""
        self.buckets.add(bucket)
        if policy is not None:
            self.policies[bucket] = policy

    async def create_bucket(self, bucket: str) -> None:
        self._record("create_bucket", bucket)
        if bucket in self.buckets:
            raise ProvisioningError(
                ErrorKind.ALREADY_EXISTS,
                f"create_bucket failed: {bucket} already exists",
                metadata={"operation": "create_bucket", "bucket": bucket},
            )
        self.buckets.add(bucket)

    async def delete_bucket(self, bucket: str) -> None:
        self._record("delete_bucket", bucket)
        if bucket not in self.buckets:
            raise ProvisioningError(
                ErrorKind.NOT_FOUND,
                f"delete_bucket failed: {bucket} does not exist",
                metadata={"operation": "delete_bucket", "bucket": bucket},
            )
        if bucket in self.non_empty:
            raise ProvisioningError(
                ErrorKind.FAILED_PRECONDITION,
                f"delete_bucket failed: {bucket} is not empty",
                metadata={"operation": "delete_bucket", "bucket": bucket},
            )
        self.buckets.discard(bucket)
        self.policies.pop(bucket, None)

    async def get_bucket_policy(self, bucket: str) -> PolicyDocument | None:
        self._record("get_bucket_policy", bucket)
        if bucket not in self.buckets:
            raise ProvisioningError(
                ErrorKind.NOT_FOUND,
                f"get_bucket_policy failed: {bucket} does not exist",
                metadata={"operation": "get_bucket_policy", "bucket": bucket},
            )
        return self.policies.get(bucket)

    async def put_bucket_policy(self, bucket: str, policy: PolicyDocument) -> None:
        self._record("put_bucket_policy", bucket, policy)
        if bucket not in self.buckets:
            raise ProvisioningError(
                ErrorKind.NOT_FOUND,
                f"put_bucket_policy failed: {bucket} does not exist",
                metadata={"operation": "put_bucket_policy", "bucket": bucket},
            )
        self.policies[bucket] = policy


class InMemoryIdentityAdmin(_FaultInjector):
    """IdentityAdminClient backed by dicts, generating deterministic keys."""

    def __init__(self, calls: list[tuple[str, tuple[Any, ...]]] | None = None) -> None:
        super().__init__(calls if calls is not None else [])
        self.accounts: dict[str, Account] = {}
        self._counter = itertools.count(1)

    def _new_key(self, owner: str) -> AccountKey:
        n = next(self._counter)
        return AccountKey(user=owner, access_key=f"AK{n:06d}", secret_key=f"SK{n:06d}")

    def _not_found(self, operation: str, uid: str, code: str = "NoSuchUser") -> ProvisioningError:
        return ProvisioningError(
            ErrorKind.NOT_FOUND,
            f"{operation} failed: {code}",
            metadata={"operation": operation, "uid": uid},
        )

    async def create_user(self, uid: str, display_name: str | None = None) -> Account:
        self._record("create_user", uid)
        if uid in self.accounts:
            raise ProvisioningError(
                ErrorKind.ALREADY_EXISTS,
                "create_user failed: UserAlreadyExists",
                metadata={"operation": "create_user", "uid": uid},
            )
        account = Account(
            user_id=uid,
            display_name=display_name or uid,
            keys=(self._new_key(uid),),
        )
        self.accounts[uid] = account
        return account

    async def get_user(self, uid: str) -> Account:
        self._record("get_user", uid)
        if uid not in self.accounts:
            raise self._not_found("get_user", uid)
        return self.accounts[uid]

    async def remove_user(self, uid: str) -> None:
        self._record("remove_user", uid)
        if self.accounts.pop(uid, None) is None:
            raise self._not_found("remove_user", uid)

    async def create_subuser(self, uid: str, subuser: str, access: str = "full") -> None:
        self._record("create_subuser", uid, subuser)
        parent = self.accounts.get(uid)
        if parent is None:
            raise self._not_found("create_subuser", uid)
        full_id = subuser_id(uid, subuser)
        if full_id in parent.subusers:
            raise ProvisioningError(
                ErrorKind.ALREADY_EXISTS,
                "create_subuser failed: SubuserExists",
                metadata={"operation": "create_subuser", "uid": uid, "subuser": subuser},
            )
        self.accounts[uid] = Account(
            user_id=parent.user_id,
            display_name=parent.display_name,
            keys=(*parent.keys, self._new_key(full_id)),
            subusers=(*parent.subusers, full_id),
        )

    async def remove_subuser(self, uid: str, subuser: str) -> None:
        self._record("remove_subuser", uid, subuser)
        parent = self.accounts.get(uid)
        full_id = subuser_id(uid, subuser)
        if parent is None or full_id not in parent.subusers:
            raise self._not_found("remove_subuser", uid, code="NoSuchSubUser")
        self.accounts[uid] = Account(
            user_id=parent.user_id,
            display_name=parent.display_name,
            keys=tuple(k for k in parent.keys if k.user != full_id),
            subusers=tuple(s for s in parent.subusers if s != full_id),
        )


class InMemoryClientFactory:
    """ClientFactory handing out one shared pair of in-memory clients.

    Attributes:
        calls: Every backend call across both clients, in order.
        builds: Connection parameters of every build() call.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.builds: list[dict[str, Any]] = []
        self.storage = InMemoryObjectStorage(self.calls)
        self.admin = InMemoryIdentityAdmin(self.calls)

    @asynccontextmanager
    async def build(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        *,
        region: str = "us-east-1",
        tls_cert: str | None = None,
    ) -> AsyncIterator[BackendClients]:
        self.builds.append(
            {"endpoint": endpoint, "access_key": access_key, "region": region, "tls_cert": tls_cert}
        )
        yield BackendClients(storage=self.storage, admin=self.admin)

    @property
    def operations(self) -> list[str]:
        """Names of the backend calls made so far."""
        return [name for name, _ in self.calls]


class InMemoryBucketMetadataStore:
    """BucketMetadataStore holding the parameters each bucket was created with."""

    def __init__(self, parameters: dict[str, dict[str, str]] | None = None) -> None:
        self.parameters: dict[str, dict[str, str]] = dict(parameters or {})

    def put(self, bucket_id: str, parameters: Mapping[str, str]) -> None:
        self.parameters[bucket_id] = dict(parameters)

    async def get(self, bucket_id: str) -> Mapping[str, str]:
        return self.parameters.get(bucket_id, {})
