"""Per-socket connection state.

Each socket owns two subscription groups: one for its lifetime (inbox)
and one for the currently open conversation, replaced on every switch.
Both are closed on disconnect.
"""
import logging
from typing import Dict, Optional

from rehab_server.realtime.subscriptions import SubscriptionGroup
from rehab_server.security.session import Session

logger = logging.getLogger(__name__)


class SocketState:
    def __init__(self, sid: str, session: Session):
        self.sid = sid
        self.session = session
        self.subscriptions = SubscriptionGroup()
        self.conversation = SubscriptionGroup()
        self.conversation_with: Optional[str] = None
        self.search = None

    def switch_conversation(self, other_user_key: Optional[str]) -> SubscriptionGroup:
        self.conversation.close()
        self.conversation = SubscriptionGroup()
        self.conversation_with = other_user_key
        return self.conversation

    def close(self):
        self.conversation.close()
        self.subscriptions.close()
        if self.search is not None:
            self.search.cancel()
            self.search = None
        logger.debug(f"Released subscriptions for sid={self.sid}")


class SocketRegistry:
    """sid -> SocketState."""

    def __init__(self):
        self._states: Dict[str, SocketState] = {}

    def add(self, state: SocketState):
        self._states[state.sid] = state

    def get(self, sid: str) -> Optional[SocketState]:
        return self._states.get(sid)

    def pop(self, sid: str) -> Optional[SocketState]:
        return self._states.pop(sid, None)

    def __len__(self):
        return len(self._states)
