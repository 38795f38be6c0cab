import uuid
from enum import Enum
from typing import Optional

from .state import DragPayload, EntityRef


class DragPhase(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    COMMITTED = "COMMITTED"
    CANCELLED = "CANCELLED"


class DragSession:
    """
    Single-pointer drag transaction holder. Owns the active drag slot.
    The slot carries an overlay copy only; committed board state never lives here.
    """

    def __init__(self):
        self._phase = DragPhase.IDLE
        self._source: Optional[EntityRef] = None
        self._payload: Optional[DragPayload] = None
        self._transaction_id: Optional[str] = None

    @property
    def phase(self) -> DragPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase == DragPhase.ACTIVE

    @property
    def source(self) -> Optional[EntityRef]:
        return self._source

    @property
    def payload(self) -> Optional[DragPayload]:
        return self._payload if self.is_active else None

    @property
    def transaction_id(self) -> Optional[str]:
        return self._transaction_id

    def transition_to(self, target_phase: DragPhase) -> None:
        """
        Validates and executes a phase transition.
        Raises ValueError if the transition is illegal.
        """
        allowed = False

        if self._phase in (DragPhase.IDLE, DragPhase.COMMITTED, DragPhase.CANCELLED):
            if target_phase == DragPhase.ACTIVE:
                allowed = True

        elif self._phase == DragPhase.ACTIVE:
            if target_phase in (DragPhase.COMMITTED, DragPhase.CANCELLED):
                allowed = True

        if not allowed:
            raise ValueError(f"Illegal drag transition: {self._phase} -> {target_phase}")

        self._phase = target_phase

    def begin(self, source: EntityRef, payload: DragPayload) -> str:
        self.transition_to(DragPhase.ACTIVE)
        self._source = source
        self._payload = payload
        self._transaction_id = str(uuid.uuid4())
        return self._transaction_id

    def commit(self) -> None:
        self.transition_to(DragPhase.COMMITTED)
        self._clear_slot()

    def cancel(self) -> None:
        self.transition_to(DragPhase.CANCELLED)
        self._clear_slot()

    def _clear_slot(self) -> None:
        self._source = None
        self._payload = None
