"""Lifecycle state machine shared by every worker server.

IDLE -> STARTING -> HEALTHY -> STOPPING -> STOPPED, with STARTING -> STOPPING
for a failed start and STOPPED -> STARTING for a restart.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from roster_e2e.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


class ServerState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    HEALTHY = "healthy"
    STOPPING = "stopping"
    STOPPED = "stopped"


ALLOWED_TRANSITIONS: dict[ServerState, frozenset[ServerState]] = {
    ServerState.IDLE: frozenset({ServerState.STARTING}),
    # STARTING -> STOPPING covers a failed start
    ServerState.STARTING: frozenset({ServerState.HEALTHY, ServerState.STOPPING}),
    ServerState.HEALTHY: frozenset({ServerState.STOPPING}),
    ServerState.STOPPING: frozenset({ServerState.STOPPED}),
    ServerState.STOPPED: frozenset({ServerState.STARTING}),
}


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class StateTransition:
    source: ServerState
    target: ServerState
    at: datetime


@dataclass
class LifecycleStateMachine:
    """Tracks the state of one worker server and the history of its changes."""

    name: str
    state: ServerState = ServerState.IDLE
    history: list[StateTransition] = field(default_factory=list)

    def can_transition(self, target: ServerState) -> bool:
        return target in ALLOWED_TRANSITIONS[self.state]

    def transition(self, target: ServerState) -> StateTransition:
        if not self.can_transition(target):
            raise InvalidStateTransition(self.name, self.state, target)

        record = StateTransition(source=self.state, target=target, at=_now())
        self.history.append(record)
        self.state = target
        logger.info(
            "%s: %s -> %s",
            self.name,
            record.source.value,
            record.target.value,
        )
        return record

    @property
    def last_changed_at(self) -> datetime | None:
        return self.history[-1].at if self.history else None

    @property
    def is_healthy(self) -> bool:
        return self.state is ServerState.HEALTHY
