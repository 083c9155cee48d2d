"""FastAPI routes for the pet gallery, search, member auth and forms."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Query, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from src.api.sessions import SessionStore, Visitor
from src.data.schemas import FilterCriteria, Pet, Species
from src.errors import HttpStatusError, SignOutError, TransportError
from src.forms.submission import (
    AdoptionForm,
    Form,
    LoginForm,
    RegistrationForm,
    SubmissionResult,
    SurrenderForm,
)
from src.members.auth import AuthSession
from src.members.schemas import AdoptionApplication
from src.search.searcher import filter_pets, get_unique_breeds, search_by_text

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def _store(request: Request) -> SessionStore:
    return request.app.state.sessions


def _lookup(request: Request) -> Visitor | None:
    """Return the caller's visitor if its cookie is known and still live."""
    session_id = request.cookies.get(request.app.state.config.session_cookie_name)
    return _store(request).get(session_id)


def _visitor(request: Request) -> tuple[str, Visitor]:
    """Return the caller's session id and visitor, starting one if needed.

    Args:
        request: FastAPI request object.

    Returns:
        Tuple of (session id to send back in the cookie, visitor state).
    """
    store = _store(request)
    session_id = request.cookies.get(request.app.state.config.session_cookie_name)
    visitor = store.get(session_id)
    if visitor is None or session_id is None:
        session_id, visitor = store.create()
    return session_id, visitor


def _set_cookie(request: Request, response: Response, session_id: str) -> None:
    response.set_cookie(
        request.app.state.config.session_cookie_name,
        session_id,
        httponly=True,
        samesite="lax",
    )


def _require_backend(request: Request) -> Any:
    backend = request.app.state.backend
    if backend is None:
        raise HTTPException(status_code=503, detail="Member services are not configured")
    return backend


def _require_member(visitor: Visitor | None) -> AuthSession:
    if visitor is None or visitor.auth is None or not visitor.auth.is_authenticated:
        raise HTTPException(status_code=401, detail="Login required")
    return visitor.auth


def _new_session(request: Request) -> AuthSession:
    config = request.app.state.config
    backend = _require_backend(request)
    return AuthSession(
        backend,
        backend,
        max_sign_out_attempts=config.sign_out_max_attempts,
        backoff_seconds=config.sign_out_backoff_seconds,
    )


def _form_response(result: SubmissionResult, success_status: int = 201) -> JSONResponse:
    if result.success:
        status = success_status
    elif "submit" in result.errors:
        status = 400
    else:
        status = 422
    return JSONResponse(status_code=status, content=result.model_dump())


async def _sign_in_form(request: Request, form: Form, success_status: int) -> JSONResponse:
    """Submit a login or registration form and attach the session on success.

    The visitor gets a new session id when it signs in, so the id used while
    anonymous cannot be replayed.
    """
    session = _new_session(request)
    session_id, _ = _visitor(request)
    result = await form.submit(session=session)
    response = _form_response(result, success_status=success_status)
    if result.success and session.is_authenticated:
        session_id = _store(request).sign_in(session_id, session)
    _set_cookie(request, response, session_id)
    return response


@router.get("/", response_class=HTMLResponse)
async def home(request: Request) -> HTMLResponse:
    """Landing page with this visitor's pet gallery, loaded on first view."""
    session_id, visitor = _visitor(request)
    if not visitor.pets:
        config = request.app.state.config
        visitor.pets = await request.app.state.aggregator.fetch_all_pets(
            config.default_limit_per_species
        )

    response = templates.TemplateResponse(
        request,
        "home.html",
        {
            "pets": visitor.pets,
            "breeds": get_unique_breeds(visitor.pets),
            "session": visitor.auth,
        },
    )
    _set_cookie(request, response, session_id)
    return response


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint for monitoring.

    Returns:
        Dict with system health status.
    """
    backend_ready = request.app.state.backend is not None
    return {
        "status": "healthy" if backend_ready else "degraded",
        "backend": "configured" if backend_ready else "not configured",
        "active_sessions": len(_store(request)),
    }


@router.get("/api/pets", response_model=list[Pet])
async def list_pets(
    request: Request,
    response: Response,
    limit: int | None = Query(None, ge=1),
    species: Species | None = None,
    available_only: bool = False,
) -> list[Pet]:
    """Fetch a fresh pet collection and make it this visitor's current one.

    Args:
        request: FastAPI request object.
        response: Response whose cookie identifies the visitor.
        limit: Images per species; defaults to the configured value.
        species: Restrict to one species. Provider errors are then returned as 502.
        available_only: Keep only pets open for adoption.

    Returns:
        The newly loaded pets.
    """
    aggregator = request.app.state.aggregator
    limit = limit or request.app.state.config.default_limit_per_species
    session_id, visitor = _visitor(request)
    _set_cookie(request, response, session_id)

    if species is not None:
        try:
            pets = await aggregator.fetch_pets_by_type(species, limit)
        except (HttpStatusError, TransportError) as exc:
            logger.warning("Loading %s pets failed: %s", species.value, exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        if available_only:
            pets = [pet for pet in pets if pet.available]
    elif available_only:
        pets = await aggregator.fetch_available_pets(limit)
    else:
        pets = await aggregator.fetch_all_pets(limit)

    visitor.pets = pets
    return pets


@router.get("/api/pets/search", response_model=list[Pet])
async def search_pets(
    request: Request,
    q: str = "",
    species: Species | None = None,
    breed: str | None = None,
    min_age: int | None = Query(None, ge=0),
    max_age: int | None = Query(None, ge=0),
) -> list[Pet]:
    """Search and filter the pets this visitor has loaded.

    Args:
        request: FastAPI request object.
        q: Text matched against breed and name.
        species: Keep only this species.
        breed: Breed substring.
        min_age: Minimum age in months, inclusive.
        max_age: Maximum age in months, inclusive.

    Returns:
        Matching pets in gallery order; empty when nothing is loaded.
    """
    visitor = _lookup(request)
    pets = visitor.pets if visitor else []
    criteria = FilterCriteria(species=species, breed=breed, min_age=min_age, max_age=max_age)
    return filter_pets(search_by_text(q, pets), criteria)


@router.get("/api/breeds")
async def list_breeds(request: Request) -> list[str]:
    """List the breeds in this visitor's loaded collection.

    Args:
        request: FastAPI request object.

    Returns:
        Sorted breed names, each once.
    """
    visitor = _lookup(request)
    return get_unique_breeds(visitor.pets if visitor else [])


@router.post("/api/members")
async def register_member(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:  # noqa: B008
    """Register a new member; signs them in when no e-mail confirmation is pending."""
    _require_backend(request)
    return await _sign_in_form(request, RegistrationForm(payload), success_status=201)


@router.post("/api/auth/login")
async def login(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:  # noqa: B008
    """Sign in with e-mail and password.

    Args:
        request: FastAPI request object.
        payload: ``email`` and ``password`` fields.

    Returns:
        200 with the member id and a fresh session cookie, 422 with field
        errors, or 400 with the auth service's message.
    """
    _require_backend(request)
    return await _sign_in_form(request, LoginForm(payload), success_status=200)


@router.post("/api/auth/logout")
async def logout(request: Request) -> JSONResponse:
    """Sign out the visitor.

    The auth session is detached even if revocation cannot be verified; the
    visitor's loaded pets stay.

    Args:
        request: FastAPI request object.

    Returns:
        200 on a verified sign-out, 502 when the token is still valid.
    """
    visitor = _lookup(request)
    session = visitor.auth if visitor else None
    if visitor is not None:
        visitor.auth = None
        visitor.auth_expires_at = None

    status, content = 200, {"success": True}
    if session is not None:
        try:
            await session.sign_out()
        except SignOutError as exc:
            logger.error("Sign-out could not be verified: %s", exc)
            status, content = 502, {"success": False, "error": str(exc)}

    return JSONResponse(status_code=status, content=content)


@router.get("/api/auth/me")
async def current_member(request: Request) -> dict:
    """Report the visitor's auth state and member details.

    Args:
        request: FastAPI request object.

    Returns:
        Dict with ``state`` and ``member`` (None when not signed in).
    """
    visitor = _lookup(request)
    session = visitor.auth if visitor else None
    if session is None:
        return {"state": "anonymous", "member": None}
    member = session.user_data()
    return {
        "state": session.state.value,
        "member": member.model_dump() if member else None,
    }


@router.post("/api/adoptions")
async def submit_adoption(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:  # noqa: B008
    """Submit an adoption application for a pet in this visitor's collection."""
    backend = _require_backend(request)
    visitor = _lookup(request)
    session = _require_member(visitor)

    form = AdoptionForm(payload)
    form.prefill(session)
    result = await form.submit(
        pets=visitor.pets,
        backend=backend,
        member_id=session.user.id if session.user else None,
        access_token=session.access_token,
    )
    return _form_response(result)


@router.post("/api/surrenders")
async def submit_surrender(request: Request, payload: dict[str, Any] = Body(...)) -> JSONResponse:  # noqa: B008
    """Submit a pet surrender request; signing in is optional.

    Args:
        request: FastAPI request object.
        payload: Owner and pet fields of the surrender form.

    Returns:
        201 with the saved request, 422 with field errors, or 400 when saving fails.
    """
    backend = _require_backend(request)
    visitor = _lookup(request)
    session = visitor.auth if visitor else None
    form = SurrenderForm(payload)
    result = await form.submit(
        backend=backend,
        access_token=session.access_token if session else None,
    )
    return _form_response(result)


@router.get("/api/members/me/applications", response_model=list[AdoptionApplication])
async def my_applications(request: Request) -> list[AdoptionApplication]:
    """List the signed-in member's adoption applications, newest first."""
    backend = _require_backend(request)
    session = _require_member(_lookup(request))
    try:
        return await asyncio.to_thread(
            backend.list_adoption_applications, session.user.id, session.access_token
        )
    except (HttpStatusError, TransportError) as exc:
        logger.warning("Loading applications failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
