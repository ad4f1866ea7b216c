"""
Authentication session for the dashboard.

AuthSession wraps the injected auth provider for the lifetime of one
dashboard session: it loads the current user, follows auth state changes,
and exposes sign in/out.
"""

import logging
from typing import Callable, List, Optional

from .backend import AuthProvider, AuthUser


class AuthSession:
    """Current user and sign in/out for one dashboard session."""

    def __init__(self, provider: AuthProvider, logger: Optional[logging.Logger] = None):
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)
        self.user: Optional[AuthUser] = None
        self.loading = True
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: List[Callable[[Optional[AuthUser]], None]] = []

    def start(self) -> Optional[AuthUser]:
        """Load the existing session and start following auth state changes."""
        self.user = self.provider.get_session_user()
        self.loading = False
        if self._unsubscribe is None:
            self._unsubscribe = self.provider.on_auth_state_change(self._on_change)
        return self.user

    def _on_change(self, user: Optional[AuthUser]):
        self.user = user
        for listener in list(self._listeners):
            listener(user)

    def on_change(self, listener: Callable[[Optional[AuthUser]], None]):
        self._listeners.append(listener)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def sign_in(self, email: str, password: str) -> Optional[str]:
        """
        Sign in with email and password.

        Returns:
            None on success, otherwise the provider's error message
        """
        try:
            self.user = self.provider.sign_in(email, password)
        except Exception as e:
            self.logger.info(f"Sign in failed for {email}: {e}")
            return str(e) or "Sign in failed"
        self.logger.info(f"Signed in as {email}")
        return None

    def sign_out(self):
        self.provider.sign_out()
        self.user = None

    def close(self):
        """Stop following auth state changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._listeners.clear()
