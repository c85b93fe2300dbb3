"""
Append-only audit trail.

Every state-changing operation writes one ``(timestamp, actor, action)`` line.
A failing sink never undoes the operation it documents; the failure is
reported through this module's logger and the ``False`` return value.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from collections import deque
from typing import Callable, Deque, List, Optional
import logging
import threading

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

@dataclass(frozen=True)
class AuditEntry:
    timestamp: str
    actor_id: str
    action: str
    
    def format(self) -> str:
        return f"{self.timestamp} | User: {self.actor_id} | Action: {self.action}"

class AuditLog:
    def __init__(
        self,
        path: Optional[Path],
        clock: Callable[[], datetime] = datetime.now,
        memory_size: int = 1000
    ):
        self.path = Path(path) if path is not None else None
        self.clock = clock
        # Recent entries only; the file is the durable record
        self._entries: Deque[AuditEntry] = deque(maxlen=memory_size)
        self._lock = threading.Lock()
    
    @property
    def entries(self) -> List[AuditEntry]:
        """Most recent entries recorded by this process, in write order."""
        with self._lock:
            return list(self._entries)
    
    def record(self, action: str, actor_id: str) -> bool:
        """Append an entry; returns False when the durable sink rejected it."""
        entry = AuditEntry(
            timestamp=self.clock().strftime(TIMESTAMP_FORMAT),
            actor_id=actor_id,
            action=action,
        )
        
        with self._lock:
            self._entries.append(entry)
            if self.path is None:
                return True
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as audit_file:
                    audit_file.write(entry.format() + "\n")
            except OSError as e:
                logger.warning(
                    f"Audit sink {self.path} unwritable, entry not persisted: "
                    f"{entry.format()} ({e})"
                )
                return False
        
        return True
