import uuid
import logging
from typing import Dict, Optional
from diagtree.core import config
from diagtree.models.session import WalkSession
from diagtree.models.tree import Step
from diagtree.services.traversal import InvalidTransition, TreeWalker
from diagtree.services.tree_store import TreeStore

logger = logging.getLogger(__name__)

class WalkSessionService:
    def __init__(self, store: TreeStore, max_sessions: Optional[int] = None):
        self.store = store
        self.max_sessions = config.MAX_SESSIONS if max_sessions is None else max_sessions
        # In-memory only; progress is never persisted
        self.sessions: Dict[str, WalkSession] = {}

    def create_session(self, tree_id: str) -> str:
        if self.store.get_tree(tree_id) is None:
            raise ValueError("Tree not found")

        session_id = str(uuid.uuid4())
        self.sessions[session_id] = WalkSession(id=session_id, tree_id=tree_id)
        while len(self.sessions) > self.max_sessions:
            oldest = next(iter(self.sessions))
            del self.sessions[oldest]
            logger.info(f"Evicted walk session {oldest}")

        logger.info(f"Started walk session {session_id} on tree {tree_id}")
        return session_id

    def get_session(self, session_id: str) -> Optional[WalkSession]:
        return self.sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def get_walker(self, session_id: str) -> TreeWalker:
        """Binds a walker to the session's own history and the store's current tree."""
        session = self.get_session(session_id)
        if not session:
            raise ValueError("Session not found")

        document = self.store.get_tree(session.tree_id)
        if document is None:
            # The tree was removed by a reload; the walk cannot continue
            self.end_session(session_id)
            logger.warning(f"Ended walk session {session_id}: tree {session.tree_id} is gone")
            raise ValueError("Tree not found")
        return TreeWalker(document.tree_data, session.history)

    def current_step(self, session_id: str) -> Step:
        return self.get_walker(session_id).current()

    def choose(self, session_id: str, target_id: str) -> TreeWalker:
        walker = self.get_walker(session_id)
        try:
            walker.choose(target_id)
        except InvalidTransition as e:
            logger.warning(f"Session {session_id}: {e}")
            raise
        return walker

    def back(self, session_id: str) -> TreeWalker:
        walker = self.get_walker(session_id)
        walker.back()
        return walker

    def restart(self, session_id: str) -> TreeWalker:
        walker = self.get_walker(session_id)
        walker.restart()
        return walker
