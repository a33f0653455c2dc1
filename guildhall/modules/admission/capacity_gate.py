"""
CapacityGate - capacity-gated admission into a bounded collection
=================================================================

One check-then-act routine shared by every "join a bounded group" operation.
Team membership and event registration both run through ``CapacityGate.admit``
and differ only in their ``AdmissionPolicy``.

Checks run in a fixed order and the first failure wins:

1. parent row exists (read with ``SELECT ... FOR UPDATE``)  -> NotFoundError
2. acting user exists                                        -> NotFoundError
3. policy-specific check (event: character owned by user)   -> NotFoundError
4. user not already admitted to this parent                  -> ConflictError
5. current count strictly below the parent's capacity       -> ConflictError
6. insert the membership row and flush

The gate never opens or commits a transaction. The caller runs ``admit``
inside ``DatabaseService.get_transaction()``; because the parent row stays
locked until commit, concurrent admissions to the same parent serialize and
cannot both pass step 5. Admissions to different parents do not contend.
No row is written unless every check passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Generic,
    Optional,
    Type,
    TypeVar,
)

from guildhall.database.models import User
from guildhall.modules.shared.base_repository import BaseRepository
from guildhall.modules.shared.exceptions import ConflictError, NotFoundError

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

P = TypeVar("P")
M = TypeVar("M")

ExtraCheck = Callable[["AsyncSession", int, Any], Awaitable[None]]


@dataclass(frozen=True)
class AdmissionPolicy(Generic[P, M]):
    """
    Describes one bounded collection.

    Message templates are ``str.format`` strings and may use ``parent_id``,
    ``user_id``, ``current`` and ``capacity``.

    Attributes:
        action: Operation name used in errors, logs and events ("join_team")
        parent_label: Resource type for NotFoundError ("Team", "Event")
        parent_model: ORM model holding the capacity
        capacity_attr: Capacity column on the parent ("max_members")
        membership_model: ORM model of the admitted rows
        parent_fk: Foreign-key column on the membership model ("team_id")
        build_row: Factory ``(parent_id, user_id, extra) -> membership row``
        extra_check: Optional async check run after the user check
    """

    action: str
    parent_label: str
    parent_model: Type[P]
    capacity_attr: str
    membership_model: Type[M]
    parent_fk: str
    build_row: Callable[[int, int, Any], M]
    parent_not_found: str
    user_not_found: str
    already_admitted: str
    full: str
    extra_check: Optional[ExtraCheck] = None


@dataclass(frozen=True)
class Admission(Generic[P, M]):
    """Result of a successful admission; ``row`` is flushed and has its id."""

    parent: P
    row: M
    occupied: int
    capacity: int

    @property
    def remaining(self) -> int:
        return self.capacity - self.occupied


class CapacityGate(Generic[P, M]):
    """
    Applies an ``AdmissionPolicy`` inside a caller-owned transaction.

    Example:
        >>> async with DatabaseService.get_transaction() as session:
        ...     admission = await gate.admit(session, team_id, user_id)
    """

    def __init__(self, policy: AdmissionPolicy[P, M], logger: Logger) -> None:
        self.policy = policy
        self.log = logger
        self._parents = BaseRepository[P](policy.parent_model, logger)
        self._users = BaseRepository[User](User, logger)
        self._members = BaseRepository[M](policy.membership_model, logger)

    def _message(self, template: str, **values: Any) -> str:
        return template.format(**values)

    async def admit(
        self,
        session: AsyncSession,
        parent_id: int,
        user_id: int,
        extra: Any = None,
    ) -> Admission[P, M]:
        """
        Admit ``user_id`` into the collection owned by ``parent_id``.

        Raises:
            NotFoundError: Parent, user or (policy-specific) extra reference missing
            ConflictError: Already admitted, or the collection is full
        """
        policy = self.policy

        parent = await self._parents.get_for_update(session, parent_id)
        if parent is None:
            raise NotFoundError(
                policy.parent_label,
                parent_id,
                message=self._message(policy.parent_not_found, parent_id=parent_id, user_id=user_id),
            )

        if not await self._users.exists(session, User.id == user_id):
            raise NotFoundError(
                "User",
                user_id,
                message=self._message(policy.user_not_found, parent_id=parent_id, user_id=user_id),
            )

        if policy.extra_check is not None:
            await policy.extra_check(session, user_id, extra)

        parent_column = getattr(policy.membership_model, policy.parent_fk)
        user_column = getattr(policy.membership_model, "user_id")

        if await self._members.exists(session, parent_column == parent_id, user_column == user_id):
            raise ConflictError(
                policy.action,
                self._message(policy.already_admitted, parent_id=parent_id, user_id=user_id),
                details={"parent_id": parent_id, "user_id": user_id},
            )

        current = await self._members.count(session, parent_column == parent_id)
        capacity = getattr(parent, policy.capacity_attr)

        if current >= capacity:
            raise ConflictError(
                policy.action,
                self._message(
                    policy.full,
                    parent_id=parent_id,
                    user_id=user_id,
                    current=current,
                    capacity=capacity,
                ),
                details={"parent_id": parent_id, "current": current, "capacity": capacity},
            )

        row = self._members.add(session, policy.build_row(parent_id, user_id, extra))
        await self._members.flush(session)

        self.log.debug(
            f"CapacityGate admitted user into {policy.parent_label}",
            extra={
                "gate_action": policy.action,
                "parent_id": parent_id,
                "user_id": user_id,
                "occupied": current + 1,
                "capacity": capacity,
            },
        )

        return Admission(parent=parent, row=row, occupied=current + 1, capacity=capacity)
