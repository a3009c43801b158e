"""
Auth session state machine
==========================

    UNKNOWN -> LOADING -> AUTHENTICATED(role)
                       -> ANONYMOUS

A session only becomes AUTHENTICATED once *both* sub-results of the current
sign-in attempt are in: the identity (session established) and the role
(admin lookup finished). They may arrive in either order.

Every ``begin()`` / ``signed_out()`` bumps ``generation``; a sub-result
tagged with an older generation belongs to a superseded attempt and is
dropped. This keeps rapid sign-in / sign-out sequences deterministic.

Reading ``is_admin`` before the role is known raises
``SessionNotReadyError`` instead of silently returning the ``False`` default.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID


class SessionState(str, enum.Enum):
    UNKNOWN = "unknown"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionNotReadyError(RuntimeError):
    """Role was read before the session finished resolving."""


@dataclass(frozen=True)
class Identity:
    user_id: UUID
    email: str
    session_id: Optional[UUID] = None


@dataclass
class AuthSession:
    state: SessionState = SessionState.UNKNOWN
    generation: int = 0
    _identity: Optional[Identity] = field(default=None, repr=False)
    _is_admin: Optional[bool] = field(default=None, repr=False)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Optional[Identity]:
        if self.state is SessionState.AUTHENTICATED:
            return self._identity
        return None

    @property
    def is_loading(self) -> bool:
        return self.state in (SessionState.UNKNOWN, SessionState.LOADING)

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        if self.state is SessionState.ANONYMOUS:
            return False
        if self.state is not SessionState.AUTHENTICATED:
            raise SessionNotReadyError("role is not resolved yet")
        return bool(self._is_admin)

    @property
    def user_id(self) -> UUID:
        identity = self.identity
        if identity is None:
            raise SessionNotReadyError("no authenticated identity")
        return identity.user_id

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def begin(self) -> int:
        """Start a sign-in / restore attempt; returns its generation."""
        self.generation += 1
        self.state = SessionState.LOADING
        self._identity = None
        self._is_admin = None
        return self.generation

    def session_established(self, identity: Identity, generation: int) -> bool:
        if not self._accepts(generation):
            return False
        self._identity = identity
        self._settle()
        return True

    def role_resolved(self, is_admin: bool, generation: int) -> bool:
        if not self._accepts(generation):
            return False
        self._is_admin = bool(is_admin)
        self._settle()
        return True

    def failed(self, generation: int) -> bool:
        if not self._accepts(generation):
            return False
        self._to_anonymous()
        return True

    def signed_out(self) -> None:
        self.generation += 1
        self._to_anonymous()

    # ------------------------------------------------------------------

    def _accepts(self, generation: int) -> bool:
        return generation == self.generation and self.state is SessionState.LOADING

    def _settle(self) -> None:
        if self._identity is not None and self._is_admin is not None:
            self.state = SessionState.AUTHENTICATED

    def _to_anonymous(self) -> None:
        self.state = SessionState.ANONYMOUS
        self._identity = None
        self._is_admin = None
