"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import (
    FileResponse,
    HTMLResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)
from starlette.datastructures import UploadFile
from starlette.middleware.sessions import SessionMiddleware

from custom_frames.api.pages import render_index_page
from custom_frames.app_logging import configure_logging
from custom_frames.containers import AppContainer
from custom_frames.domain.errors import (
    ConversionError,
    ForbiddenError,
    IdentityLookupError,
    NotFoundError,
    ValidationError,
)
from custom_frames.domain.frames import (
    FRAME_HEIGHT,
    FRAME_WIDTH,
    FrameRecord,
    SteamProfile,
)

SESSION_STEAM_ID = "steam_id"
SESSION_MESSAGE = "message"
SESSION_ERROR = "error"
SESSION_MAX_AGE_SECONDS = 24 * 60 * 60

ASSET_MEDIA_TYPES = {
    ".png": "image/png",
    ".dds": "image/vnd-ms.dds",
    ".json": "application/json",
}

_VALIDATION_MESSAGES = {
    "not a png": "File not a png",
    "wrong format": "File not a png",
    "wrong dimensions": f"File must be {FRAME_WIDTH}x{FRAME_HEIGHT} pixels",
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=SESSION_MAX_AGE_SECONDS,
        https_only=settings.is_production,
        same_site="lax",
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/healthz", response_class=PlainTextResponse)
    async def healthz() -> str:
        """Plain-text health check for the hosting platform."""
        return "OK"

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> HTMLResponse:
        """List every frame; show the upload form when signed in."""
        state_container: AppContainer = request.app.state.container
        frames = await asyncio.to_thread(state_container.frame_service.list_frames)
        return await _render_gallery(request, state_container, frames)

    @app.get("/my-frames", response_class=HTMLResponse)
    async def my_frames(request: Request) -> Response:
        """List frames owned by the signed-in user."""
        state_container: AppContainer = request.app.state.container
        steam_id = request.session.get(SESSION_STEAM_ID)
        if not steam_id:
            return _redirect("/")
        frames = await asyncio.to_thread(
            state_container.frame_service.list_frames, owner_id=steam_id
        )
        return await _render_gallery(
            request, state_container, frames, heading="My frames"
        )

    async def _render_gallery(
        request: Request,
        state_container: AppContainer,
        frames: list[FrameRecord],
        heading: str | None = None,
    ) -> HTMLResponse:
        steam_id = request.session.get(SESSION_STEAM_ID)
        message = request.session.pop(SESSION_MESSAGE, None)
        error = request.session.pop(SESSION_ERROR, None)
        profile: SteamProfile | None = None
        if steam_id:
            try:
                profile = await state_container.identity_service.resolve(steam_id)
            except IdentityLookupError as exc:
                logger.exception(
                    "Failed to load Steam profile", extra={"steam_id": steam_id}
                )
                error = error or _format_error(
                    state_container, exc, "Couldn't load your Steam profile."
                )
        return HTMLResponse(
            render_index_page(
                frames,
                viewer_id=steam_id,
                profile=profile,
                message=message,
                error=error,
                heading=heading,
            )
        )

    @app.post("/upload")
    @app.post("/", include_in_schema=False)
    async def upload(request: Request) -> RedirectResponse:
        """Accept a multipart upload in the ``image`` field."""
        state_container: AppContainer = request.app.state.container
        steam_id = request.session.get(SESSION_STEAM_ID)
        if not steam_id:
            request.session[SESSION_ERROR] = "Sign in with Steam to upload frames."
            return _redirect("/")
        if state_container.upload_service.is_banned(steam_id):
            logger.info("Banned upload attempt", extra={"steam_id": steam_id})
            return _redirect(state_container.settings.banned_redirect_url)

        filename: str | None = None
        content_type: str | None = None
        data = b""
        async with request.form() as form:
            image = form.get("image")
            if isinstance(image, UploadFile):
                filename = image.filename
                content_type = image.content_type
                data = await image.read()

        try:
            record = await state_container.upload_service.upload(
                steam_id=steam_id,
                filename=filename,
                content_type=content_type,
                data=data,
            )
        except ValidationError as exc:
            request.session[SESSION_ERROR] = _VALIDATION_MESSAGES.get(
                str(exc), str(exc)
            )
        except IdentityLookupError as exc:
            logger.exception("Upload identity lookup failed")
            request.session[SESSION_ERROR] = _format_error(
                state_container, exc, "Couldn't reach Steam. Please try again."
            )
        except ConversionError as exc:
            logger.exception("Frame conversion failed", extra={"steam_id": steam_id})
            request.session[SESSION_ERROR] = _format_error(
                state_container,
                exc,
                "Couldn't convert that image. Please try again.",
            )
        except OSError as exc:
            logger.exception("Failed to store frame", extra={"steam_id": steam_id})
            request.session[SESSION_ERROR] = _format_error(
                state_container, exc, "Upload failed, please try again."
            )
        else:
            logger.info("Frame uploaded", extra={"frame_id": record.id})
            request.session[SESSION_MESSAGE] = "Upload successful"
        return _redirect("/")

    @app.get("/img/{name}")
    async def frame_asset(name: str, request: Request) -> FileResponse:
        """Serve ``<id>.png``, ``<id>.dds`` or ``<id>.json``."""
        state_container: AppContainer = request.app.state.container
        path = state_container.frame_service.asset_path(name)
        if path is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return FileResponse(path, media_type=ASSET_MEDIA_TYPES.get(path.suffix))

    @app.delete("/img/{frame_id}")
    async def delete_frame(frame_id: str, request: Request) -> dict[str, str]:
        """Delete a frame owned by the signed-in user."""
        state_container: AppContainer = request.app.state.container
        steam_id = request.session.get(SESSION_STEAM_ID)
        if not steam_id:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
        try:
            await asyncio.to_thread(
                state_container.frame_service.delete, frame_id, requester_id=steam_id
            )
        except NotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        except ForbiddenError as exc:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc
        except OSError as exc:
            logger.exception("Failed to delete frame", extra={"frame_id": frame_id})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
            ) from exc
        return {"status": "ok"}

    @app.get("/template.png")
    async def template_png(request: Request) -> Response:
        """Serve the blank frame template."""
        state_container: AppContainer = request.app.state.container
        return Response(
            content=state_container.upload_service.template_png(),
            media_type="image/png",
        )

    @app.get("/login")
    async def login(request: Request) -> RedirectResponse:
        """Send the user to Steam to sign in."""
        state_container: AppContainer = request.app.state.container
        return _redirect(state_container.steam_openid.login_url())

    @app.get("/auth")
    async def auth(request: Request) -> Response:
        """Handle the Steam OpenID callback."""
        state_container: AppContainer = request.app.state.container
        try:
            steam_id = await state_container.steam_openid.verify(
                dict(request.query_params)
            )
        except httpx.HTTPError:
            logger.exception("Steam OpenID verification failed")
            steam_id = None
        if not steam_id:
            return PlainTextResponse(
                "Failed to sign in with Steam", status_code=status.HTTP_403_FORBIDDEN
            )
        request.session[SESSION_STEAM_ID] = steam_id
        logger.info("Signed in", extra={"steam_id": steam_id})
        return _redirect("/")

    @app.get("/logout")
    async def logout(request: Request) -> RedirectResponse:
        """Forget the signed-in user."""
        request.session.clear()
        return _redirect("/")

    return app


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


def _format_error(
    state_container: AppContainer, exc: Exception, fallback: str
) -> str:
    """Return a user-facing error message with local debug info."""
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
