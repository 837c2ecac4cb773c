"""HTTP route definitions for the account portal."""

from __future__ import annotations

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from schemas import Account as AccountView, AccountProfile

from ..config import Settings
from ..domain.account import Account
from ..domain.contracts import RegistrationInput
from ..domain.errors import TokenInvalidOrExpired, USER_FACING_FAILURES, ValidationFailure
from ..domain.password_reset import PasswordResetWorkflow
from ..domain.service import AccountService
from ..security.sessions import bind_session, clear_session, session_account_id
from ..web.flash import flash
from ..web.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


def get_reset_workflow(request: Request) -> PasswordResetWorkflow:
    """Resolve the `PasswordResetWorkflow` stored on the FastAPI application state."""
    workflow: PasswordResetWorkflow = request.app.state.reset_workflow
    return workflow


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def current_account(request: Request, service: AccountService = Depends(get_service)) -> Account | None:
    """Return the account bound to the session, dropping identities that no longer exist."""
    account_id = session_account_id(request.session)
    if account_id is None:
        return None
    account = service.get_account(account_id)
    if account is None:
        clear_session(request.session)
    return account


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


def _account_view(account: Account | None) -> AccountView | None:
    if account is None:
        return None
    return AccountView(
        account_id=account.account_id,
        email=account.email,
        profile=AccountProfile(name=account.name, surname=account.surname),
        created_at=account.created_at,
    )


def _reset_link(request: Request, settings: Settings, token: str) -> str:
    if settings.public_base_url:
        return f"{settings.public_base_url}/reset/{token}"
    return str(request.url_for("show_reset_form", token=token))


@router.get("/", response_class=HTMLResponse)
def home(request: Request, account: Account | None = Depends(current_account)):
    """Render the landing page for signed-in accounts, the login form otherwise."""
    if account is not None:
        return templates.TemplateResponse(request, "index.html", {"user": _account_view(account)})
    return templates.TemplateResponse(request, "home.html", {"title": "Home"})


@router.post("/login")
def login(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    service: AccountService = Depends(get_service),
) -> RedirectResponse:
    """Sign in using email and password."""
    if not email.strip():
        flash(request, "Please enter your email address.", "errors")
        return _redirect("/")
    if not password:
        flash(request, "Please enter your password.", "errors")
        return _redirect("/")

    try:
        account = service.authenticate(email, password)
    except USER_FACING_FAILURES as exc:
        flash(request, exc.message, "errors")
        return _redirect("/")

    bind_session(request.session, account)
    return _redirect("/")


@router.get("/logout")
def logout(request: Request) -> RedirectResponse:
    clear_session(request.session)
    return _redirect("/")


@router.get("/account/signup", response_class=HTMLResponse)
def signup_form(request: Request, account: Account | None = Depends(current_account)):
    if account is not None:
        return _redirect("/")
    return templates.TemplateResponse(request, "account/signup.html", {"title": "Create Account"})


@router.post("/account/signup")
def signup(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default="", alias="confirmPassword"),
    name: str = Form(default=""),
    surname: str = Form(default=""),
    service: AccountService = Depends(get_service),
) -> RedirectResponse:
    """Create a new local account and sign it in."""
    try:
        account = service.register(
            RegistrationInput(
                email=email,
                password=password,
                confirm_password=confirm_password,
                name=name,
                surname=surname,
            )
        )
    except USER_FACING_FAILURES as exc:
        flash(request, exc.message, "errors")
        return _redirect("/account/signup")

    bind_session(request.session, account)
    return _redirect("/")


@router.get("/account/forgot", response_class=HTMLResponse)
def forgot_form(request: Request, account: Account | None = Depends(current_account)):
    if account is not None:
        return _redirect("/")
    return templates.TemplateResponse(
        request,
        "account/forgot.html",
        {"title": "Password Reset", "reset": False},
    )


@router.post("/account/forgot")
def forgot(
    request: Request,
    email: str = Form(default=""),
    workflow: PasswordResetWorkflow = Depends(get_reset_workflow),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Create a random token, then send the account an email with a reset link."""
    try:
        account = workflow.request_reset(
            email,
            reset_url=lambda token: _reset_link(request, settings, token),
        )
    except USER_FACING_FAILURES as exc:
        flash(request, exc.message, "errors")
        return _redirect("/account/forgot")

    flash(request, f"An e-mail has been sent to {account.email} with further instructions.", "info")
    return _redirect("/account/forgot")


@router.get("/reset/{token}", response_class=HTMLResponse)
def show_reset_form(
    request: Request,
    token: str,
    account: Account | None = Depends(current_account),
    workflow: PasswordResetWorkflow = Depends(get_reset_workflow),
):
    """Render the new-password form when ``token`` is still live."""
    if account is not None:
        return _redirect("/")
    try:
        workflow.validate_token(token)
    except TokenInvalidOrExpired as exc:
        flash(request, exc.message, "errors")
        return _redirect("/account/forgot")
    return templates.TemplateResponse(
        request,
        "account/forgot.html",
        {"title": "Password Reset", "reset": True, "token": token},
    )


@router.post("/reset")
def reset(
    request: Request,
    token: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default="", alias="confirmPassword"),
    workflow: PasswordResetWorkflow = Depends(get_reset_workflow),
) -> RedirectResponse:
    """Process the reset password request."""
    try:
        workflow.complete_reset(
            token,
            password,
            confirm_password,
            on_reset=lambda account: bind_session(request.session, account),
        )
    except ValidationFailure as exc:
        flash(request, exc.message, "errors")
        if token:
            return _redirect(f"/reset/{quote(token, safe='')}")
        return _redirect("/account/forgot")
    except USER_FACING_FAILURES as exc:
        flash(request, exc.message, "errors")
        return _redirect("/account/forgot")

    flash(request, "Success! Your password has been changed.", "success")
    return _redirect("/")
