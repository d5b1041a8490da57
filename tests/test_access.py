import pytest

from listing_pdf.access import (
    AccessDenied,
    Caller,
    NonceSigner,
    authorize_download,
    can_generate_pdf,
    download_action,
)
from listing_pdf.models import ListingNotFoundError

OWNER = Caller(user_id=7)
ADMIN = Caller(user_id=1, is_admin=True)
STRANGER = Caller(user_id=99)
ANONYMOUS = Caller()


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestNonceSigner:
    def test_round_trip(self):
        signer = NonceSigner("secret")
        token = signer.create("pdf_download_42", 7)

        assert signer.verify(token, "pdf_download_42", 7)

    def test_bound_to_action_and_user(self):
        signer = NonceSigner("secret")
        token = signer.create("pdf_download_42", 7)

        assert not signer.verify(token, "pdf_download_43", 7)
        assert not signer.verify(token, "pdf_download_42", 8)
        assert not NonceSigner("other").verify(token, "pdf_download_42", 7)

    def test_missing_token(self):
        assert not NonceSigner("secret").verify(None, "pdf_download_42", 7)
        assert not NonceSigner("secret").verify("", "pdf_download_42", 7)

    def test_expiry(self):
        clock = FakeClock()
        signer = NonceSigner("secret", lifetime=100, clock=clock)
        token = signer.create("a", 7)

        clock.now += 60
        assert signer.verify(token, "a", 7)
        clock.now += 100
        assert not signer.verify(token, "a", 7)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            NonceSigner("")


class TestPermissions:
    def test_owner_and_admin_allowed(self):
        assert can_generate_pdf(OWNER, 7)
        assert can_generate_pdf(ADMIN, 7)

    def test_others_denied(self):
        assert not can_generate_pdf(STRANGER, 7)
        assert not can_generate_pdf(ANONYMOUS, 0)
        assert not can_generate_pdf(Caller(user_id=0, is_admin=True), 7)


class TestAuthorizeDownload:
    def setup_method(self):
        self.signer = NonceSigner("secret")

    def token_for(self, caller, listing_id=42):
        return self.signer.create(download_action(listing_id), caller.user_id)

    def test_owner_allowed(self, store):
        authorize_download(OWNER, 42, self.token_for(OWNER), store, self.signer)

    def test_admin_allowed(self, store):
        authorize_download(ADMIN, 42, self.token_for(ADMIN), store, self.signer)

    def test_missing_token(self, store):
        with pytest.raises(AccessDenied, match="Invalid request"):
            authorize_download(OWNER, 42, None, store, self.signer)

    def test_forged_token(self, store):
        with pytest.raises(AccessDenied, match="Security check failed"):
            authorize_download(OWNER, 42, "0" * 32, store, self.signer)

    def test_token_for_other_listing(self, store):
        with pytest.raises(AccessDenied):
            authorize_download(OWNER, 42, self.token_for(OWNER, listing_id=43), store, self.signer)

    def test_stranger_with_own_valid_token(self, store):
        with pytest.raises(AccessDenied, match="permission"):
            authorize_download(STRANGER, 42, self.token_for(STRANGER), store, self.signer)

    def test_unknown_listing(self, store):
        with pytest.raises(ListingNotFoundError):
            authorize_download(ADMIN, 999, self.token_for(ADMIN, 999), store, self.signer)
