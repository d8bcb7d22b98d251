"""Access checks for fields and entities.

Usage:
    def entity_access(op, entity_type, entity, account):
        if op is Operation.DELETE:
            return account.is_admin
        return None  # no opinion

    guard = AccessGuard(entity_access)
    guard.entity_access(Operation.UPDATE, "node", entity, account)  # AccessDecision
    guard.field_access(descriptor, Operation.EDIT, interpreter)  # bool
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
from typing import TypeAlias

from entityprovider.core.entity import StoredEntity
from entityprovider.core.errors import PermissionDeniedError
from entityprovider.core.field import FieldDescriptor, HttpMethod, Operation
from entityprovider.core.types import Account, EntityKey
from entityprovider.observability import get_logger
from entityprovider.provider.interpreter import EntityInterpreter

logger = get_logger(__name__)

EntityAccessCallback: TypeAlias = Callable[[Operation, str, StoredEntity, Account], bool | None]
"""Entity-level policy. None means no decision."""


class AccessDecision(Enum):
    ALLOW = auto()
    DENY = auto()
    UNKNOWN = auto()

    @classmethod
    def from_result(cls, result: bool | None) -> AccessDecision:
        if result is None:
            return cls.UNKNOWN
        return cls.ALLOW if result else cls.DENY

    def permits(self) -> bool:
        """Entity-level reading: only an explicit DENY refuses."""
        return self is not AccessDecision.DENY


class AccessGuard:
    """Per-field and per-entity permission checks.

    Field level: a field is usable when it applies to the entity's bundle and its
    policy explicitly allows the operation. Entity level: UNKNOWN counts as allowed.

    Args:
        entity_access: Entity-level policy callback (default: no opinion on anything).
    """

    def __init__(self, entity_access: EntityAccessCallback | None = None):
        self._entity_access = entity_access

    def field_access(
        self, descriptor: FieldDescriptor, op: Operation, interpreter: EntityInterpreter
    ) -> bool:
        """Check if a field may be viewed or edited on the wrapped entity."""
        bundle = interpreter.bundle
        if descriptor.bundles and bundle is not None and bundle not in descriptor.bundles:
            return False
        return descriptor.access(op, interpreter)

    @staticmethod
    def method_access(descriptor: FieldDescriptor, method: HttpMethod) -> bool:
        """Check if a field applies to the request method."""
        return method in descriptor.methods

    def entity_access(
        self, op: Operation, entity_type: str, entity: StoredEntity, account: Account
    ) -> AccessDecision:
        if self._entity_access is None:
            return AccessDecision.UNKNOWN
        return AccessDecision.from_result(self._entity_access(op, entity_type, entity, account))

    def authorize(
        self,
        op: Operation,
        entity_type: str,
        entity: StoredEntity,
        account: Account,
        *,
        explicit: bool = True,
        entity_id: EntityKey | None = None,
    ) -> bool:
        """Enforce entity access for an operation.

        A denied view of an item that was not explicitly requested (a list row) is
        reported as False. Every other denial raises.

        Args:
            op: Operation to perform.
            entity_type: Entity type of the entity.
            entity: Entity to check (may be new and unsaved).
            account: Account the operation runs as.
            explicit: Whether the caller addressed this entity directly.
            entity_id: Id used in the error message.

        Returns:
            True if allowed, False for a silently dropped list item.

        Raises:
            PermissionDeniedError: On any other denial.
        """
        if self.entity_access(op, entity_type, entity, account).permits():
            return True
        if op is Operation.VIEW and not explicit:
            logger.debug("entity_dropped_from_list", entity_type=entity_type, entity_id=entity_id)
            return False
        if op is Operation.CREATE:
            raise PermissionDeniedError("You do not have access to create a new resource.")
        raise PermissionDeniedError(f"You do not have access to entity ID {entity_id}.")
