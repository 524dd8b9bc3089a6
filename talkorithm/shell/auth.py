"""Identity provider protocol and the single-account local implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from talkorithm.config import settings

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Account:
    """A signed-in user."""

    uid: str
    display_name: str = "Student"
    email: str = ""
    photo_url: str = ""


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol for sign-in providers."""

    @property
    def current_user(self) -> Account | None: ...

    async def sign_in(self) -> Account: ...

    async def sign_out(self) -> None: ...

    def subscribe(
        self, listener: Callable[[Account | None], None]
    ) -> Callable[[], None]:
        """Call *listener* now and on every auth change; returns an unsubscribe."""
        ...


class LocalAuth:
    """Signs in one fixed local account taken from settings."""

    def __init__(self, account: Account | None = None) -> None:
        self._account = account or Account(
            uid=settings.local_account_id,
            display_name=settings.local_display_name,
            email=settings.local_email,
        )
        self._user: Account | None = None
        self._listeners: list[Callable[[Account | None], None]] = []

    @property
    def current_user(self) -> Account | None:
        return self._user

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)

    async def sign_in(self) -> Account:
        self._user = self._account
        logger.info("Signed in as %s", self._user.uid)
        self._emit()
        return self._user

    async def sign_out(self) -> None:
        if self._user is not None:
            logger.info("Signed out %s", self._user.uid)
        self._user = None
        self._emit()

    def subscribe(
        self, listener: Callable[[Account | None], None]
    ) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self._user)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
