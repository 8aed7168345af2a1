from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable

from . import auth
from .client import ReleaseDockError, ServiceClient
from .commands import (
    AccessKeyList,
    AccessKeyRemove,
    AppAdd,
    AppList,
    AppRemove,
    AppRename,
    Command,
    Deploy,
    DeploymentAdd,
    DeploymentKeyList,
    DeploymentList,
    DeploymentRemove,
    DeploymentRename,
    Login,
    Logout,
    Register,
)
from .config import load_session
from .context import ExecutionContext
from .output import format_deployment_key_list, format_deployment_list, format_list, validate_format
from .release_package import PackageError, package_path
from .resolver import require_access_key_id, require_app, require_app_id, require_deployment, require_deployment_id

__all__ = ["ExecutionContext", "execute"]


def _confirm_then(ctx: ExecutionContext, action: Callable[[], None], done_message: str) -> None:
    if ctx.confirm():
        action()
        ctx.log(done_message)
        return
    ctx.log("Remove cancelled.")


def _access_key_list(cmd: AccessKeyList, ctx: ExecutionContext, client: ServiceClient) -> None:
    validate_format(cmd.format)
    ctx.log(format_list(cmd.format, client.get_access_keys()))


def _access_key_remove(cmd: AccessKeyRemove, ctx: ExecutionContext, client: ServiceClient) -> None:
    access_key_id = require_access_key_id(client, cmd.access_key_name)
    _confirm_then(
        ctx,
        lambda: client.remove_access_key(access_key_id),
        f'Removed access key "{cmd.access_key_name}".',
    )


def _app_add(cmd: AppAdd, ctx: ExecutionContext, client: ServiceClient) -> None:
    app = client.add_app(cmd.app_name, None)
    ctx.log(f'Added app "{cmd.app_name}" with ID {app.id}.')


def _app_list(cmd: AppList, ctx: ExecutionContext, client: ServiceClient) -> None:
    validate_format(cmd.format)
    ctx.log(format_list(cmd.format, client.get_apps()))


def _app_remove(cmd: AppRemove, ctx: ExecutionContext, client: ServiceClient) -> None:
    app_id = require_app_id(client, cmd.app_name)
    _confirm_then(ctx, lambda: client.remove_app(app_id), f'Removed app "{cmd.app_name}".')


def _app_rename(cmd: AppRename, ctx: ExecutionContext, client: ServiceClient) -> None:
    app = require_app(client, cmd.current_app_name)
    client.update_app(replace(app, name=cmd.new_app_name))
    ctx.log(f'Renamed app "{cmd.current_app_name}" to "{cmd.new_app_name}".')


def _deploy(cmd: Deploy, ctx: ExecutionContext, client: ServiceClient) -> None:
    app_id = require_app_id(client, cmd.app_name)
    deployment_id = require_deployment_id(client, app_id, cmd.deployment_name, app_name=cmd.app_name)

    try:
        package_file = package_path(cmd.package_path, work_dir=ctx.work_dir)
    except PackageError as e:
        raise ReleaseDockError(str(e)) from e

    try:
        client.add_package(
            app_id,
            deployment_id,
            package_file.path,
            cmd.description,
            None,
            cmd.min_app_version,
            cmd.mandatory,
        )
        ctx.log(
            f'Deployed package {cmd.package_path} to deployment "{cmd.deployment_name}" for app "{cmd.app_name}".'
        )
    finally:
        if package_file.is_temporary:
            package_file.path.unlink(missing_ok=True)


def _deployment_add(cmd: DeploymentAdd, ctx: ExecutionContext, client: ServiceClient) -> None:
    app_id = require_app_id(client, cmd.app_name)
    deployment = client.add_deployment(app_id, cmd.deployment_name, None)
    ctx.log(f'Added deployment "{cmd.deployment_name}" with ID {deployment.id} to app "{cmd.app_name}".')


def _deployment_key_list(cmd: DeploymentKeyList, ctx: ExecutionContext, client: ServiceClient) -> None:
    validate_format(cmd.format)
    app_id = require_app_id(client, cmd.app_name)
    deployment_id = require_deployment_id(client, app_id, cmd.deployment_name, app_name=cmd.app_name)
    ctx.log(format_deployment_key_list(cmd.format, client.get_deployment_keys(app_id, deployment_id)))


def _deployment_list(cmd: DeploymentList, ctx: ExecutionContext, client: ServiceClient) -> None:
    validate_format(cmd.format)
    app_id = require_app_id(client, cmd.app_name)
    ctx.log(format_deployment_list(cmd.format, client.get_deployments(app_id), verbose=cmd.verbose))


def _deployment_remove(cmd: DeploymentRemove, ctx: ExecutionContext, client: ServiceClient) -> None:
    app_id = require_app_id(client, cmd.app_name)
    deployment_id = require_deployment_id(client, app_id, cmd.deployment_name, app_name=cmd.app_name)
    _confirm_then(
        ctx,
        lambda: client.remove_deployment(app_id, deployment_id),
        f'Removed deployment "{cmd.deployment_name}" from app "{cmd.app_name}".',
    )


def _deployment_rename(cmd: DeploymentRename, ctx: ExecutionContext, client: ServiceClient) -> None:
    app_id = require_app_id(client, cmd.app_name)
    deployment = require_deployment(client, app_id, cmd.current_deployment_name, app_name=cmd.app_name)
    client.update_deployment(app_id, replace(deployment, name=cmd.new_deployment_name))
    ctx.log(
        f'Renamed deployment "{cmd.current_deployment_name}" to "{cmd.new_deployment_name}" '
        f'for app "{cmd.app_name}".'
    )


_HANDLERS: dict[type, Callable[[Any, ExecutionContext, ServiceClient], None]] = {
    AccessKeyList: _access_key_list,
    AccessKeyRemove: _access_key_remove,
    AppAdd: _app_add,
    AppList: _app_list,
    AppRemove: _app_remove,
    AppRename: _app_rename,
    Deploy: _deploy,
    DeploymentAdd: _deployment_add,
    DeploymentKeyList: _deployment_key_list,
    DeploymentList: _deployment_list,
    DeploymentRemove: _deployment_remove,
    DeploymentRename: _deployment_rename,
}


def execute(command: Command, ctx: ExecutionContext | None = None) -> None:
    """
    Run one command end to end.

    Any failure surfaces as an exception (``ReleaseDockError`` for everything this
    package raises); success paths report through ``ctx.log``.
    """
    ctx = ctx or ExecutionContext()
    session = load_session(ctx.session_path)

    if isinstance(command, Login):
        auth.login(ctx, command.server_url)
        return
    if isinstance(command, Register):
        auth.register(ctx, command.server_url)
        return
    if isinstance(command, Logout):
        auth.logout(ctx, session)
        return

    handler = _HANDLERS.get(type(command))
    if handler is None:
        raise ReleaseDockError(f"Invalid command: {command!r}")

    client = auth.reauthenticate(ctx, session)
    try:
        handler(command, ctx, client)
    finally:
        client.close()
