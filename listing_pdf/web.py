"""FastAPI app serving listing PDF downloads."""

import argparse
import asyncio

import uvicorn
from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from loguru import logger

from .access import AccessDenied, Caller, NonceSigner, authorize_download, can_generate_pdf, download_action
from .config import Settings, configure_logging
from .main import build_extractor, generate_listing_pdf
from .models import ListingNotFoundError
from .store import ContentStore, InMemoryContentStore


def get_caller(
    x_user_id: int = Header(0),
    x_user_role: str = Header(""),
) -> Caller:
    """
    Identity of the caller, as forwarded by the upstream auth layer.

    Override this dependency (app.dependency_overrides) to plug in a
    different authentication scheme.
    """
    roles = {role.strip().lower() for role in x_user_role.split(",") if role.strip()}
    return Caller(user_id=x_user_id, is_admin="administrator" in roles)


def create_app(store: ContentStore | None = None, settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    if store is None:
        store = (
            InMemoryContentStore.from_json(settings.source_path)
            if settings.source_path
            else InMemoryContentStore()
        )

    app = FastAPI(title="Listing PDF Generator")
    app.state.store = store
    app.state.settings = settings
    app.state.signer = NonceSigner(settings.secret_key, settings.nonce_lifetime)

    @app.get("/api/listings/{listing_id}/nonce")
    async def issue_nonce(listing_id: int, request: Request, caller: Caller = Depends(get_caller)):
        """Token for the download button; only offered to callers allowed to use it."""
        store = request.app.state.store
        if store.get_title(listing_id) is None:
            return HTMLResponse("Listing not found.", status_code=404)
        if not can_generate_pdf(caller, store.get_owner_id(listing_id)):
            return HTMLResponse("You do not have permission to download this PDF", status_code=403)
        nonce = request.app.state.signer.create(download_action(listing_id), caller.user_id)
        return JSONResponse({"nonce": nonce})

    @app.get("/api/listings/{listing_id}/pdf")
    async def download_pdf(
        listing_id: int,
        request: Request,
        nonce: str | None = None,
        caller: Caller = Depends(get_caller),
    ):
        state = request.app.state
        try:
            authorize_download(caller, listing_id, nonce, state.store, state.signer)
        except AccessDenied as e:
            logger.warning("PDF download denied for user {} on listing {}: {}", caller.user_id, listing_id, e)
            return HTMLResponse(str(e), status_code=403)
        except ListingNotFoundError:
            return HTMLResponse("Listing not found.", status_code=404)

        extractor = build_extractor(state.store, state.settings)
        result = await asyncio.to_thread(
            generate_listing_pdf,
            listing_id,
            state.store,
            state.settings,
            extractor=extractor,
        )
        if not result.ok:
            logger.error("PDF generation failed for listing {}: {}", listing_id, result.error)
            return HTMLResponse("PDF generation failed", status_code=500)

        return Response(
            content=result.pdf,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'attachment; filename="{result.filename}"',
                "Cache-Control": "private, max-age=0, must-revalidate",
                "Pragma": "public",
            },
        )

    return app


def _default_app() -> FastAPI:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings=settings)


app = _default_app()


def serve(argv: list[str] | None = None) -> None:
    """Run the app with uvicorn (`listing-pdf-server`)."""
    parser = argparse.ArgumentParser(description="Serve listing PDF downloads over HTTP.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    args = parser.parse_args(argv)

    uvicorn.run("listing_pdf.web:app", host=args.host, port=args.port, reload=args.reload)
