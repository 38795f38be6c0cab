import uuid
from enum import Enum
from typing import Iterable, Optional, Set


class UidStrategy(str, Enum):
    UUID = "uuid"
    COUNTER = "counter"


class DuplicateInstanceUidError(Exception):
    """Raised when an instance uid would be issued twice. Unreachable with a working allocator."""
    pass


class InstanceUidAllocator:
    """
    Issues instance uids that are unique for the lifetime of one board session.

    UUID strategy: 128-bit random uuid4 strings.
    COUNTER strategy: "<board_id>:stop:<n>", seeded at board load time.
    """

    def __init__(self, board_id: Optional[str] = None, strategy: UidStrategy = UidStrategy.UUID):
        self.board_id = board_id or str(uuid.uuid4())
        self.strategy = UidStrategy(strategy)
        self._counter = 0
        self._issued: Set[str] = set()

    def new_instance_uid(self) -> str:
        if self.strategy == UidStrategy.COUNTER:
            self._counter += 1
            uid = f"{self.board_id}:stop:{self._counter}"
        else:
            uid = str(uuid.uuid4())
        if uid in self._issued:
            raise DuplicateInstanceUidError(f"Instance uid {uid} already issued")
        self._issued.add(uid)
        return uid

    def reserve(self, uids: Iterable[str]) -> None:
        """Marks uids restored from a snapshot as taken."""
        for uid in uids:
            if uid in self._issued:
                raise DuplicateInstanceUidError(f"Instance uid {uid} already issued")
            self._issued.add(uid)
        if self.strategy == UidStrategy.COUNTER:
            prefix = f"{self.board_id}:stop:"
            for uid in self._issued:
                if uid.startswith(prefix) and uid[len(prefix):].isdigit():
                    self._counter = max(self._counter, int(uid[len(prefix):]))

    @property
    def issued_count(self) -> int:
        return len(self._issued)
