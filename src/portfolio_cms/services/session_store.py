"""Session store for the signed-in identity and its credential token.

The store is the single writer of the persisted ``auth_token`` and
``user`` values. Readers take ``store.state`` or subscribe to changes and
never read local storage themselves.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass

from portfolio_cms.client.api import PortfolioApi
from portfolio_cms.client.auth import AuthClient
from portfolio_cms.data.crud import local_storage
from portfolio_cms.data.crud.local_storage import AUTH_TOKEN_KEY, USER_KEY
from portfolio_cms.errors import PortfolioCMSError
from portfolio_cms.schemas import AuthResult, LoginForm, RegisterForm, User
from portfolio_cms.schemas.validation import validate_form

logger = logging.getLogger(__name__)

__all__ = ["SessionState", "SessionStore"]

Subscriber = Callable[["SessionState"], None]


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot of the session: who is signed in, and whether a token exists."""

    identity: User | None = None
    authenticated: bool = False


class SessionStore:
    """Holds the current identity and persists it with its token.

    Args:
        auth_client: Client for the ``/auth`` endpoints. May be attached
            later with :meth:`bind`.
        on_logout: Navigation hook run after logout (e.g. show the login
            screen).
    """

    def __init__(
        self,
        auth_client: AuthClient | None = None,
        *,
        on_logout: Callable[[], None] | None = None,
    ) -> None:
        self._auth = auth_client
        self._on_logout = on_logout
        self._state = SessionState()
        self._token: str | None = None
        self._subscribers: list[Subscriber] = []

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> User | None:
        return self._state.identity

    @property
    def authenticated(self) -> bool:
        return self._state.authenticated

    def get_token(self) -> str | None:
        """Return the credential token sent with every API call."""
        return self._token

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for state changes and return an unsubscriber."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def bind(self, api: PortfolioApi) -> None:
        """Wire the store to an API bundle.

        The transport reads the token from this store, and a 401 on any
        authenticated call logs the session out.
        """
        self._auth = api.auth
        api.transport.set_token_provider(self.get_token)
        api.transport.set_unauthorized_handler(self.logout)

    def set_logout_handler(self, handler: Callable[[], None] | None) -> None:
        self._on_logout = handler

    def _set_state(self, identity: User | None, token: str | None) -> None:
        self._token = token
        self._state = SessionState(identity=identity, authenticated=bool(token))
        for callback in list(self._subscribers):
            callback(self._state)

    def restore(self) -> SessionState:
        """Re-read the persisted session without any network call.

        A stored token keeps the user signed in until a request proves it
        invalid. An unreadable stored identity is discarded.
        """
        token = local_storage.get_item(AUTH_TOKEN_KEY)
        identity: User | None = None
        raw_user = local_storage.get_item(USER_KEY)
        if raw_user:
            try:
                identity = User.model_validate(json.loads(raw_user))
            except (ValueError, TypeError):
                logger.warning("Discarding unreadable stored identity")
                local_storage.remove_item(USER_KEY)
        self._set_state(identity, token)
        return self._state

    def _persist(self, result: AuthResult) -> User:
        local_storage.set_item(AUTH_TOKEN_KEY, result.token)
        local_storage.set_item(USER_KEY, result.user.model_dump_json())
        self._set_state(result.user, result.token)
        return result.user

    def _require_auth(self) -> AuthClient:
        if self._auth is None:
            raise PortfolioCMSError("Session store is not bound to an API client")
        return self._auth

    async def login(self, identifier: str, password: str) -> User:
        """Sign in and persist the identity and token.

        Raises:
            ValidationError: Identifier or password too short; no request is made.
            AuthError: The server refused the credentials.
            TransportError: The server could not be reached.
        """
        form = validate_form(LoginForm, {"identifier": identifier, "password": password})
        result = await self._require_auth().login(form.identifier, form.password)
        logger.info("Signed in as %s", result.user.username)
        return self._persist(result)

    async def register(self, *, email: str, username: str, password: str, name: str) -> User:
        """Create an account, then sign in as it."""
        form = validate_form(
            RegisterForm,
            {"identifier": username, "password": password, "email": email, "name": name},
        )
        result = await self._require_auth().register(
            email=str(form.email), username=form.identifier, password=form.password, name=form.name
        )
        logger.info("Registered %s", result.user.username)
        return self._persist(result)

    async def refresh_identity(self) -> User:
        """Reload the identity behind the current token and persist it."""
        user = await self._require_auth().me()
        local_storage.set_item(USER_KEY, user.model_dump_json())
        self._set_state(user, self._token)
        return user

    def logout(self) -> None:
        """Forget the token and identity, then run the navigation hook."""
        local_storage.remove_item(AUTH_TOKEN_KEY)
        local_storage.remove_item(USER_KEY)
        self._set_state(None, None)
        logger.info("Signed out")
        if self._on_logout is not None:
            self._on_logout()
