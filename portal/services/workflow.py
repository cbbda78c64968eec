"""
Approval workflow: transition predicates and their application.

Threshold (currency units, inclusive on the director side):
  amount <  10,000 → finance approves straight from pending
  amount >= 10,000 → director approves first, then finance

  pending ──director_approve──▶ director_approved ──finance_approve──▶ finance_approved
     │ └─────────────finance_approve (amount < threshold)──────────────▶ │
     └──reject──▶ rejected ◀──reject── director_approved

finance_approved and rejected are terminal. Delete is gated on role only.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, ClassVar, Optional, Union

import structlog

from portal.exceptions import AuthorizationError

logger = structlog.get_logger()

APPROVAL_THRESHOLD = Decimal("10000")


class Role(str, Enum):
    DIRECTOR = "director"
    FINANCE = "finance"
    NONE = "none"


PRIVILEGED_ROLES = frozenset({Role.DIRECTOR, Role.FINANCE})

PENDING = "pending"
DIRECTOR_APPROVED = "director_approved"
FINANCE_APPROVED = "finance_approved"
REJECTED = "rejected"

TERMINAL_STATUSES = frozenset({FINANCE_APPROVED, REJECTED})


# ---------- transition commands ----------


@dataclass(frozen=True)
class DirectorApprove:
    name: ClassVar[str] = "director_approve"


@dataclass(frozen=True)
class FinanceApprove:
    name: ClassVar[str] = "finance_approve"


@dataclass(frozen=True)
class Reject:
    name: ClassVar[str] = "reject"


@dataclass(frozen=True)
class Delete:
    name: ClassVar[str] = "delete"


TransitionCommand = Union[DirectorApprove, FinanceApprove, Reject, Delete]

COMMANDS: dict[str, TransitionCommand] = {
    cmd.name: cmd for cmd in (DirectorApprove(), FinanceApprove(), Reject(), Delete())
}


def command_for(action: str) -> TransitionCommand:
    try:
        return COMMANDS[action]
    except KeyError:
        raise ValueError(f"Unknown workflow action: {action!r}") from None


# ---------- helpers ----------


def _as_role(role) -> Role:
    """Coerce a role value; anything unrecognised carries no permissions."""
    if isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return Role.NONE


def _amount(purchase) -> Decimal:
    amount = purchase.amount
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def _is_approved(stamp) -> bool:
    if stamp is None:
        return False
    if isinstance(stamp, dict):
        return stamp.get("approved") is True
    return getattr(stamp, "approved", False) is True


def _status(purchase) -> str:
    status = purchase.status
    return status.value if isinstance(status, Enum) else status


# ---------- denial reasons (None means the transition is legal) ----------


def _director_approve_denial(purchase, role: Role) -> Optional[str]:
    if role != Role.DIRECTOR:
        return "Only the director can give director approval"
    if _status(purchase) != PENDING:
        return f"Director approval requires a pending request (status is {_status(purchase)})"
    if _amount(purchase) < APPROVAL_THRESHOLD:
        return f"Requests below {APPROVAL_THRESHOLD} do not need director approval"
    if _is_approved(purchase.director_approval):
        return "Request already carries director approval"
    return None


def _finance_approve_denial(purchase, role: Role) -> Optional[str]:
    if role != Role.FINANCE:
        return "Only finance can give finance approval"
    if _status(purchase) not in (PENDING, DIRECTOR_APPROVED):
        return f"Finance approval is not possible once a request is {_status(purchase)}"
    if _amount(purchase) >= APPROVAL_THRESHOLD and not _is_approved(purchase.director_approval):
        return f"Requests of {APPROVAL_THRESHOLD} or more need director approval first"
    if _is_approved(purchase.finance_approval):
        return "Request already carries finance approval"
    return None


def _reject_denial(purchase, role: Role) -> Optional[str]:
    if role not in PRIVILEGED_ROLES:
        return "Only director or finance can reject a request"
    if _status(purchase) in TERMINAL_STATUSES:
        return f"A {_status(purchase)} request can no longer be rejected"
    return None


def _delete_denial(purchase, role: Role) -> Optional[str]:
    if role not in PRIVILEGED_ROLES:
        return "Only director or finance can delete a request"
    return None


_DENIALS: dict[type, Callable[[object, Role], Optional[str]]] = {
    DirectorApprove: _director_approve_denial,
    FinanceApprove: _finance_approve_denial,
    Reject: _reject_denial,
    Delete: _delete_denial,
}


# ---------- decision functions ----------


def can_director_approve(purchase, role) -> bool:
    return _director_approve_denial(purchase, _as_role(role)) is None


def can_finance_approve(purchase, role) -> bool:
    return _finance_approve_denial(purchase, _as_role(role)) is None


def can_reject(purchase, role) -> bool:
    return _reject_denial(purchase, _as_role(role)) is None


def can_delete(purchase, role) -> bool:
    return _delete_denial(purchase, _as_role(role)) is None


def is_allowed(command: TransitionCommand, purchase, role) -> bool:
    return _DENIALS[type(command)](purchase, _as_role(role)) is None


def allowed_actions(purchase, role) -> dict[str, bool]:
    """Action affordances for one request, keyed by command name."""
    return {
        DirectorApprove.name: can_director_approve(purchase, role),
        FinanceApprove.name: can_finance_approve(purchase, role),
        Reject.name: can_reject(purchase, role),
        Delete.name: can_delete(purchase, role),
    }


def require_actor(role) -> Role:
    """Return the actor's Role, or raise ROLE_REQUIRED for anyone not signed in."""
    actor = _as_role(role)
    if actor not in PRIVILEGED_ROLES:
        raise AuthorizationError(
            "Sign in as director or finance to act on purchase requests",
            code="ROLE_REQUIRED",
        )
    return actor


def ensure_allowed(command: TransitionCommand, purchase, role) -> None:
    """Raise AuthorizationError unless ``command`` is legal for ``role``."""
    actor = require_actor(role)
    reason = _DENIALS[type(command)](purchase, actor)
    if reason is not None:
        logger.warning(
            "workflow_transition_denied",
            purchase_id=str(purchase.id),
            action=command.name,
            role=actor.value,
            status=_status(purchase),
            reason=reason,
        )
        raise AuthorizationError(reason)


# ---------- application ----------


def plan_transition(
    command: TransitionCommand,
    purchase,
    role,
    now: Optional[datetime] = None,
) -> dict:
    """
    Compute the partial field set a transition writes.

    Re-checks the matching predicate and raises AuthorizationError when it
    fails. Delete has no field set; use apply_transition for it.
    """
    ensure_allowed(command, purchase, role)
    now = now or datetime.now(timezone.utc)
    stamp = {"approved": True, "date": now.isoformat()}

    if isinstance(command, DirectorApprove):
        return {"status": DIRECTOR_APPROVED, "director_approval": stamp, "updated_at": now}
    if isinstance(command, FinanceApprove):
        return {"status": FINANCE_APPROVED, "finance_approval": stamp, "updated_at": now}
    if isinstance(command, Reject):
        # approval stamps are kept as a record of who signed off before rejection
        return {"status": REJECTED, "updated_at": now}
    raise ValueError(f"{command.name} has no field set to plan")


async def apply_transition(
    store,
    purchase_id: str,
    command: TransitionCommand,
    role,
    now: Optional[datetime] = None,
):
    """
    Apply ``command`` to the stored request on behalf of ``role``.

    Returns the updated Purchase, or None for Delete. The write is
    conditional on the status the decision was made against, so a request
    changed by someone else in between raises ConflictError instead of
    being overwritten.
    """
    # anonymous callers learn nothing about which ids exist
    require_actor(role)
    purchase = await store.get(purchase_id)
    from_status = _status(purchase)

    if isinstance(command, Delete):
        ensure_allowed(command, purchase, role)
        await store.delete(purchase_id)
        logger.info(
            "workflow_purchase_deleted",
            purchase_id=str(purchase_id),
            role=_as_role(role).value,
            status=from_status,
        )
        return None

    fields = plan_transition(command, purchase, role, now=now)
    updated = await store.update(purchase_id, fields, expected_status=from_status)
    logger.info(
        "workflow_transition_applied",
        purchase_id=str(purchase_id),
        action=command.name,
        role=_as_role(role).value,
        from_status=from_status,
        to_status=fields["status"],
    )
    return updated
