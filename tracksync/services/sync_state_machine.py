"""Sync state machine for the orchestrator's detection/prompt/resolve cycle.

Centralizes transition validation and broadcasting.
"""

import logging
from enum import Enum

from tracksync.services.event_broadcaster import EventBroadcaster

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = "idle"
    WAITING_FOR_DATA = "waiting_for_data"
    AUTO_SYNC_ATTEMPTING = "auto_sync_attempting"
    PROMPTING = "prompting"
    RESOLVED = "resolved"


class SyncStateMachine:
    """Tracks the orchestrator state and validates transitions."""

    # The picker can be opened by the user at any time, so PROMPTING is
    # reachable from every non-terminal state.
    VALID_TRANSITIONS = {
        SyncState.IDLE: {
            SyncState.WAITING_FOR_DATA,
            SyncState.AUTO_SYNC_ATTEMPTING,
            SyncState.PROMPTING,
        },
        SyncState.WAITING_FOR_DATA: {
            SyncState.AUTO_SYNC_ATTEMPTING,
            SyncState.PROMPTING,
            SyncState.IDLE,
        },
        SyncState.AUTO_SYNC_ATTEMPTING: {
            SyncState.RESOLVED,
            SyncState.PROMPTING,
            SyncState.IDLE,
        },
        SyncState.PROMPTING: {
            SyncState.WAITING_FOR_DATA,
            SyncState.RESOLVED,
            SyncState.IDLE,
        },
        SyncState.RESOLVED: {SyncState.IDLE},
    }

    def __init__(self, event_broadcaster: EventBroadcaster | None = None):
        self._broadcaster = event_broadcaster
        self.state = SyncState.IDLE

    def can_transition(self, from_state: SyncState, to_state: SyncState) -> bool:
        """Validate if state transition is allowed.

        Args:
            from_state: Current state
            to_state: Desired state

        Returns:
            True if transition is valid, False otherwise
        """
        # Allow staying in same state
        if from_state == to_state:
            return True

        return to_state in self.VALID_TRANSITIONS.get(from_state, set())

    async def transition(self, to_state: SyncState, broadcast: bool = True) -> bool:
        """Perform a validated state transition.

        Args:
            to_state: Target state
            broadcast: Whether to broadcast the state change

        Returns:
            True if transition succeeded, False if invalid
        """
        from_state = self.state

        if not self.can_transition(from_state, to_state):
            logger.warning(f"Invalid sync state transition: {from_state.value} -> {to_state.value}")
            return False

        if from_state == to_state:
            return True

        logger.info(f"Sync state transition: {from_state.value} -> {to_state.value}")
        self.state = to_state

        # Broadcast failure is non-fatal; the state has already changed
        if broadcast and self._broadcaster is not None:
            try:
                await self._broadcaster.broadcast_sync_state(to_state)
            except Exception as e:
                logger.error(
                    f"Broadcast failed after entering {to_state.value}: {e}",
                    exc_info=True,
                )

        return True

    def get_next_states(self, current_state: SyncState) -> set[SyncState]:
        """Get valid next states from current state."""
        return self.VALID_TRANSITIONS.get(current_state, set())
