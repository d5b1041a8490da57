"""Who may download a listing PDF, and the anti-forgery tokens that gate it."""

import hashlib
import hmac
import time
from dataclasses import dataclass
from typing import Callable

from .models import ListingNotFoundError, ListingPdfError
from .store import ContentStore


class AccessDenied(ListingPdfError):
    """Request refused before the pipeline runs."""


@dataclass(frozen=True)
class Caller:
    user_id: int = 0  # 0 means not logged in
    is_admin: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id > 0


def download_action(listing_id) -> str:
    return f"pdf_download_{listing_id}"


class NonceSigner:
    """
    HMAC tokens bound to an action and a user.

    Like WordPress nonces, a token is tied to a time tick of half the
    lifetime and is accepted during its own tick and the one after, so it
    stays valid for between lifetime/2 and lifetime seconds.
    """

    def __init__(self, secret: str, lifetime: int = 86400, clock: Callable[[], float] = time.time):
        if not secret:
            raise ValueError("Nonce secret must not be empty")
        self._secret = secret.encode()
        self.lifetime = lifetime
        self._clock = clock

    def _tick(self) -> int:
        return int(self._clock() // (self.lifetime / 2)) + 1

    def _sign(self, tick: int, action: str, user_id: int) -> str:
        message = f"{tick}|{action}|{user_id}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()[:32]

    def create(self, action: str, user_id: int) -> str:
        return self._sign(self._tick(), action, user_id)

    def verify(self, token: str | None, action: str, user_id: int) -> bool:
        if not token:
            return False
        tick = self._tick()
        return any(
            hmac.compare_digest(token, self._sign(t, action, user_id))
            for t in (tick, tick - 1)
        )


def can_generate_pdf(caller: Caller, owner_id: int | None) -> bool:
    """Logged-in listing owner, or an administrator."""
    if not caller.is_authenticated:
        return False
    if caller.is_admin:
        return True
    return owner_id is not None and caller.user_id == owner_id


def authorize_download(
    caller: Caller,
    listing_id,
    token: str | None,
    store: ContentStore,
    signer: NonceSigner,
) -> None:
    """
    Raise AccessDenied unless `caller` may download `listing_id` with `token`.

    Raises ListingNotFoundError when the listing does not exist.
    """
    if not token:
        raise AccessDenied("Invalid request")
    if not signer.verify(token, download_action(listing_id), caller.user_id):
        raise AccessDenied("Security check failed")
    if store.get_title(listing_id) is None:
        raise ListingNotFoundError(f"Listing {listing_id}: source not found")
    if not can_generate_pdf(caller, store.get_owner_id(listing_id)):
        raise AccessDenied("You do not have permission to download this PDF")
