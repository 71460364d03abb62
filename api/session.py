"""Signed session tokens and the live game each one owns."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import uuid4

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from config import config
from core.game import CrazyEightsGame

logger = logging.getLogger(__name__)


class SessionSigner:
    """Sign and verify session IDs using itsdangerous."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._serializer = URLSafeTimedSerializer(secret_key or config.security.secret_key)

    def sign(self, session_id: str) -> str:
        """Create a signed token from a session ID."""
        return self._serializer.dumps(session_id)

    def unsign(self, token: str, max_age: int | None = None) -> str | None:
        """
        Verify a token and return the session ID inside it.

        Args:
            token: Signed token
            max_age: Maximum age in seconds (defaults to session_ttl)

        Returns:
            The session ID, or None for a forged or expired token
        """
        try:
            return self._serializer.loads(token, max_age=max_age or config.session_ttl)
        except (BadSignature, SignatureExpired):
            return None


_session_signer: SessionSigner | None = None


def get_session_signer() -> SessionSigner:
    """Get or create the session signer."""
    global _session_signer
    if _session_signer is None:
        _session_signer = SessionSigner()
    return _session_signer


@dataclass
class GameSession:
    """A live game and the moment its session lapses."""

    game: CrazyEightsGame
    expires_at: datetime

    @property
    def expired(self) -> bool:
        return self.expires_at < datetime.now()


class GameSessionStore:
    """
    Process-local registry of games keyed by signed session token.

    A session lives for ``ttl`` seconds from creation, matching the signer's
    max age. Expired sessions are evicted on lookup and whenever a new
    session is opened, so abandoned games do not accumulate.
    """

    def __init__(self, ttl: int | None = None) -> None:
        self.ttl = ttl or config.session_ttl
        self._sessions: dict[str, GameSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, game: CrazyEightsGame) -> str:
        """Open a session for a game and return its signed token."""
        self.cleanup_expired()
        token = get_session_signer().sign(str(uuid4()))
        self._sessions[token] = GameSession(game, datetime.now() + timedelta(seconds=self.ttl))
        logger.debug("Opened session %s, %d live", token[:8], len(self))
        return token

    def get(self, token: str) -> CrazyEightsGame | None:
        """The session's game, or None if it never existed or has lapsed."""
        session = self._sessions.get(token)
        if session is None:
            return None
        if session.expired:
            self._evict(token)
            return None
        return session.game

    def cleanup_expired(self) -> int:
        """Evict every lapsed session; returns how many were dropped."""
        expired = [token for token, session in self._sessions.items() if session.expired]
        for token in expired:
            self._evict(token)
        if expired:
            logger.info("Evicted %d expired sessions", len(expired))
        return len(expired)

    def _evict(self, token: str) -> None:
        session = self._sessions.pop(token)
        session.game.close()


_session_store: GameSessionStore | None = None


def get_session_store() -> GameSessionStore:
    """Get or create the session store."""
    global _session_store
    if _session_store is None:
        _session_store = GameSessionStore()
    return _session_store


def extract_session_id(token: str) -> str | None:
    """The raw session ID inside a signed token, or None if it does not verify."""
    return get_session_signer().unsign(token)
