import heapq
import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(order=True)
class ScheduledEvent:
    due: float
    seq: int
    kind: str = field(compare=False)
    target: str = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class EventQueue:
    """Time-ordered queue of deferred room events (e.g. respawns).

    - Time is whatever clock the owning room uses; the queue never reads a clock
    - Ensures a single pending event per (kind, target); rescheduling replaces it
    - cancel() / cancel_target() / clear() drop events before they fire
    """

    def __init__(self):
        self._heap: List[ScheduledEvent] = []
        self._pending: Dict[Tuple[str, str], ScheduledEvent] = {}
        self._seq = itertools.count()

    def __len__(self):
        return len(self._pending)

    def schedule(self, kind: str, target: str, due: float) -> ScheduledEvent:
        self.cancel(kind, target)
        event = ScheduledEvent(due=due, seq=next(self._seq), kind=kind, target=target)
        self._pending[(kind, target)] = event
        heapq.heappush(self._heap, event)
        return event

    def cancel(self, kind: str, target: str) -> bool:
        event = self._pending.pop((kind, target), None)
        if event is None:
            return False
        event.cancelled = True
        return True

    def cancel_target(self, target: str) -> int:
        keys = [key for key in self._pending if key[1] == target]
        for kind, _ in keys:
            self.cancel(kind, target)
        return len(keys)

    def pending_for(self, target: str) -> List[ScheduledEvent]:
        return [e for (_, t), e in self._pending.items() if t == target]

    def pop_due(self, now: float) -> List[ScheduledEvent]:
        """Remove and return every live event with due <= now, earliest first."""
        fired = []
        while self._heap and self._heap[0].due <= now:
            event = heapq.heappop(self._heap)
            if event.cancelled:
                continue
            self._pending.pop((event.kind, event.target), None)
            fired.append(event)
        return fired

    def clear(self) -> None:
        for event in self._pending.values():
            event.cancelled = True
        self._pending.clear()
        self._heap.clear()
