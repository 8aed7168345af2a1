"""
Interactive login/registration, silent re-authentication, and logout.

The access token handed out by the service is base64-encoded JSON carrying the
identity fields of a ``Session``; the CLI keeps those fields (never the raw
token) and re-encodes them to log back in on later invocations.
"""

from __future__ import annotations

import base64
import binascii
import json
import webbrowser

from .client import AuthRequiredError, ReleaseDockError, ReleaseDockHTTPError, ServiceClient
from .config import Session, clear_session, save_session, session_path
from .context import ExecutionContext
from .resolver import resolve_access_key_id

AUTH_INSTRUCTIONS = (
    "An internet browser will now launch to authenticate your identity.\n\n"
    "After completing in-browser authentication, please enter your access token "
    "to log in or use [CTRL]+[C] to exit."
)


def encode_access_token(session: Session) -> str:
    identity = {
        "accessKeyName": session.access_key_name,
        "providerName": session.provider_name,
        "providerUniqueId": session.provider_unique_id,
    }
    raw = json.dumps(identity, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def session_from_access_token(access_token: str, server_url: str) -> Session:
    try:
        raw = base64.b64decode(access_token.encode("ascii"), validate=True)
        identity = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise AuthRequiredError("Invalid access token.") from e
    if not isinstance(identity, dict):
        raise AuthRequiredError("Invalid access token.")

    session = Session.from_json({**identity, "serverUrl": server_url})
    if session is None:
        raise AuthRequiredError("Invalid access token.")
    return session


def initiate_external_authentication(ctx: ExecutionContext, server_url: str, action: str) -> None:
    ctx.log(AUTH_INSTRUCTIONS)

    url = f"{server_url.rstrip('/')}/auth/{action}"
    ctx.log(f"\nLaunching browser for {url}")
    try:
        ctx.open_browser(url)
    except webbrowser.Error as e:
        ctx.warn(f"could not open a browser ({e}); open the URL above manually.")


def login_with_token_prompt(ctx: ExecutionContext, server_url: str) -> None:
    access_token = ctx.prompt_token()
    if access_token is None:
        # Aborted at the prompt (e.g. Ctrl-C): nothing to do.
        return
    if not access_token:
        ctx.log("Invalid access token.")
        return

    client = ctx.new_client(server_url)
    try:
        client.login_with_access_token(access_token)
    finally:
        client.close()

    session = session_from_access_token(access_token, server_url)
    ctx.log("Log in successful.")

    path = save_session(session, ctx.session_path)
    ctx.log(f"Login token persisted to file '{path}'. Run 'releasedock logout' to remove the file.")


def login(ctx: ExecutionContext, server_url: str) -> None:
    initiate_external_authentication(ctx, server_url, "login")
    login_with_token_prompt(ctx, server_url)


def register(ctx: ExecutionContext, server_url: str) -> None:
    initiate_external_authentication(ctx, server_url, "register")
    login_with_token_prompt(ctx, server_url)


def reauthenticate(ctx: ExecutionContext, session: Session | None) -> ServiceClient:
    """Log in with the persisted session and return the authenticated client."""
    if session is None:
        raise AuthRequiredError("You are not logged in.")

    client = ctx.new_client(session.server_url)
    try:
        client.login_with_access_token(encode_access_token(session))
    except ReleaseDockHTTPError as e:
        client.close()
        raise AuthRequiredError(
            f"You are not logged in (the stored session was rejected with HTTP {e.status_code}). "
            "Run 'releasedock login' again."
        ) from e
    except BaseException:
        client.close()
        raise
    return client


def logout(ctx: ExecutionContext, session: Session | None) -> None:
    if session is None:
        return

    client: ServiceClient | None = None
    try:
        client = reauthenticate(ctx, session)
    except ReleaseDockError as e:
        ctx.warn(f"could not re-authenticate: {e}")

    try:
        if client is not None:
            try:
                access_key_id = resolve_access_key_id(client, session.access_key_name)
                if access_key_id:
                    client.remove_access_key(access_key_id)
            except ReleaseDockError as e:
                ctx.warn(f"could not remove access key \"{session.access_key_name}\": {e}")

            try:
                client.logout()
            except ReleaseDockError as e:
                ctx.warn(f"remote logout failed: {e}")
    finally:
        if client is not None:
            client.close()
        if clear_session(ctx.session_path):
            ctx.log(f"Deleted configuration file at '{session_path(ctx.session_path)}'.")

    ctx.log("Log out successful.")
