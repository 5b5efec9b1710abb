"""Local identity holder shared by the store and the router."""

from __future__ import annotations

from flowgazer.models._validation import validate_hex


class Session:
    """Who "me" is for classification purposes.

    The store and the router hold a reference to the same instance, so a
    login or logout is seen by both at once. Callers that switch identity
    must also clear derived state; [FeedContext][flowgazer.feed.context.FeedContext]
    does this in ``login()`` and ``logout()``.
    """

    def __init__(self, pubkey: str | None = None) -> None:
        self._pubkey: str | None = None
        if pubkey is not None:
            self.login(pubkey)

    def local_identity_key(self) -> str | None:
        return self._pubkey

    def is_authenticated(self) -> bool:
        return self._pubkey is not None

    def login(self, pubkey: str) -> None:
        """Set the local identity (64-char lowercase hex)."""
        validate_hex(pubkey, "pubkey")
        self._pubkey = pubkey

    def logout(self) -> None:
        self._pubkey = None

    def __repr__(self) -> str:
        return f"Session(pubkey={self._pubkey!r})"
