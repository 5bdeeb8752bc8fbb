"""
Status transition tables for every lifecycle entity.

Each table maps a source status to the statuses it may move to. Targets that
need side data (a rejection reason, a note describing missing documents) list
the payload field that must be non-empty.
"""
from typing import Any, Dict, Iterable, Mapping, Optional, Set
import logging

from ..core.config import settings
from ..core.exceptions import ValidationError
from ..models.database_models import (
    AnnouncementStatus,
    AppointmentStatus,
    BlotterStatus,
    CertificateStatus,
    EventStatus,
    VerificationStatus,
)

logger = logging.getLogger(__name__)


class StatusMachine:
    def __init__(
        self,
        entity: str,
        statuses: Iterable[str],
        transitions: Mapping[str, Set[str]],
        required_fields: Optional[Mapping[str, str]] = None,
    ):
        self.entity = entity
        self.statuses = set(statuses)
        self.transitions = {source: set(targets) for source, targets in transitions.items()}
        self.required_fields = dict(required_fields or {})

    def allowed_targets(self, current: str) -> Set[str]:
        return self.transitions.get(current, set())

    def is_terminal(self, status: str) -> bool:
        return not self.allowed_targets(status)

    def check(
        self,
        current: str,
        target: str,
        payload: Optional[Dict[str, Any]] = None,
        enforce: Optional[bool] = None,
    ) -> None:
        """
        Raise ValidationError unless `current -> target` is allowed.

        `target` must always belong to the status domain. With enforcement off
        any in-domain status may be written regardless of the current one.
        """
        if target not in self.statuses:
            raise ValidationError(f"Invalid {self.entity} status: {target}")

        if enforce is None:
            enforce = settings.ENFORCE_STATUS_TRANSITIONS

        if enforce and target not in self.allowed_targets(current):
            raise ValidationError(
                f"Cannot change {self.entity} status from '{current}' to '{target}'."
            )

        field = self.required_fields.get(target)
        if field and not str((payload or {}).get(field) or "").strip():
            raise ValidationError(f"A {field} is required to set status '{target}'.")


def _values(enum_cls) -> Set[str]:
    return {member.value for member in enum_cls}


C = CertificateStatus
CERTIFICATE_MACHINE = StatusMachine(
    "certificate",
    _values(CertificateStatus),
    {
        C.PENDING.value: {C.PROCESSING.value, C.REJECTED.value, C.ADDITIONAL_INFO.value},
        C.PROCESSING.value: {C.READY.value, C.REJECTED.value, C.ADDITIONAL_INFO.value},
        C.ADDITIONAL_INFO.value: {C.PENDING.value, C.PROCESSING.value},
        C.READY.value: {C.COMPLETED.value},
    },
    {C.REJECTED.value: "rejectedReason", C.ADDITIONAL_INFO.value: "notes"},
)

A = AppointmentStatus
APPOINTMENT_MACHINE = StatusMachine(
    "appointment",
    _values(AppointmentStatus),
    {
        A.PENDING.value: {A.CONFIRMED.value, A.CANCELLED.value},
        A.CONFIRMED.value: {A.COMPLETED.value, A.CANCELLED.value},
    },
)

B = BlotterStatus
BLOTTER_MACHINE = StatusMachine(
    "blotter",
    _values(BlotterStatus),
    {
        B.PENDING.value: {B.INVESTIGATING.value, B.ADDITIONAL_INFO.value},
        B.INVESTIGATING.value: {B.RESOLVED.value, B.ADDITIONAL_INFO.value},
        B.ADDITIONAL_INFO.value: {B.INVESTIGATING.value},
        B.RESOLVED.value: {B.CLOSED.value},
    },
)

ANNOUNCEMENT_MACHINE = StatusMachine(
    "announcement",
    _values(AnnouncementStatus),
    {
        AnnouncementStatus.DRAFT.value: {AnnouncementStatus.PUBLISHED.value},
        AnnouncementStatus.PUBLISHED.value: {AnnouncementStatus.DRAFT.value, AnnouncementStatus.EXPIRED.value},
    },
)

EVENT_MACHINE = StatusMachine(
    "event",
    _values(EventStatus),
    {
        EventStatus.ACTIVE.value: {EventStatus.INACTIVE.value},
        EventStatus.INACTIVE.value: {EventStatus.ACTIVE.value},
    },
)

VERIFICATION_MACHINE = StatusMachine(
    "verification",
    _values(VerificationStatus),
    {
        VerificationStatus.PENDING.value: {VerificationStatus.VERIFIED.value, VerificationStatus.REJECTED.value},
    },
)
