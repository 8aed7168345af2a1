from __future__ import annotations

import argparse
import json
import sys
import textwrap

from ._version import __version__
from .client import ReleaseDockError, ReleaseDockHTTPError
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
from .config import resolve_server_url, resolve_timeout_s
from .context import ExecutionContext
from .executor import execute
from .output import FORMATS


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="releasedock",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="Manage apps, deployments and releases on a ReleaseDock server.",
        epilog=textwrap.dedent(
            """\
            Environment variables:
              RELEASEDOCK_SERVER_URL, RELEASEDOCK_TIMEOUT_S, RELEASEDOCK_SESSION_PATH
            """
        ),
    )
    p.add_argument("--timeout-s", type=float, help="HTTP timeout in seconds")
    p.add_argument("--version", action="version", version=f"releasedock {__version__}")

    def _add_format(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--format", choices=FORMATS, default="table", help="Output format (default: table)")

    sub = p.add_subparsers(dest="cmd", required=True)

    # auth
    for name, help_text in (
        ("login", "Open the browser to log in, then paste the access token"),
        ("register", "Open the browser to create an account, then paste the access token"),
    ):
        auth_cmd = sub.add_parser(name, help=help_text)
        auth_cmd.add_argument("--server-url", help="Server URL (overrides RELEASEDOCK_SERVER_URL)")
    sub.add_parser("logout", help="Remove this machine's access key and forget the session")

    # apps
    app = sub.add_parser("app", help="Manage apps")
    app_sub = app.add_subparsers(dest="subcmd", required=True)
    app_add = app_sub.add_parser("add", help="Add a new app")
    app_add.add_argument("app_name")
    app_list = app_sub.add_parser("list", aliases=["ls"], help="List your apps")
    _add_format(app_list)
    app_remove = app_sub.add_parser("remove", aliases=["rm"], help="Remove an app")
    app_remove.add_argument("app_name")
    app_rename = app_sub.add_parser("rename", help="Rename an app")
    app_rename.add_argument("current_app_name")
    app_rename.add_argument("new_app_name")

    # deployments
    dep = sub.add_parser("deployment", help="Manage deployments of an app")
    dep_sub = dep.add_subparsers(dest="subcmd", required=True)
    dep_add = dep_sub.add_parser("add", help="Add a deployment to an app")
    dep_add.add_argument("app_name")
    dep_add.add_argument("deployment_name")
    dep_list = dep_sub.add_parser("list", aliases=["ls"], help="List the deployments of an app")
    dep_list.add_argument("app_name")
    dep_list.add_argument("-v", "--verbose", action="store_true", help="Include descriptions and package metadata")
    _add_format(dep_list)
    dep_remove = dep_sub.add_parser("remove", aliases=["rm"], help="Remove a deployment from an app")
    dep_remove.add_argument("app_name")
    dep_remove.add_argument("deployment_name")
    dep_rename = dep_sub.add_parser("rename", help="Rename a deployment")
    dep_rename.add_argument("app_name")
    dep_rename.add_argument("current_deployment_name")
    dep_rename.add_argument("new_deployment_name")

    # deployment keys
    dkey = sub.add_parser("deployment-key", help="Inspect deployment keys")
    dkey_sub = dkey.add_subparsers(dest="subcmd", required=True)
    dkey_list = dkey_sub.add_parser("list", aliases=["ls"], help="List the keys of a deployment")
    dkey_list.add_argument("app_name")
    dkey_list.add_argument("deployment_name")
    _add_format(dkey_list)

    # access keys
    akey = sub.add_parser("access-key", help="Manage access keys")
    akey_sub = akey.add_subparsers(dest="subcmd", required=True)
    akey_list = akey_sub.add_parser("list", aliases=["ls"], help="List your access keys")
    _add_format(akey_list)
    akey_remove = akey_sub.add_parser("remove", aliases=["rm"], help="Remove an access key")
    akey_remove.add_argument("access_key_name")

    # releases
    deploy = sub.add_parser("deploy", help="Upload a release (file or folder) to a deployment")
    deploy.add_argument("app_name")
    deploy.add_argument("package", help="Path to a file or a folder (folders are zipped)")
    deploy.add_argument("min_app_version", help="Binary app version the release targets")
    deploy.add_argument("--deployment-name", default="Staging", help="Target deployment (default: Staging)")
    deploy.add_argument("--description", help="Release description")
    deploy.add_argument("--mandatory", action="store_true", help="Mark the release as mandatory")

    return p


def command_from_args(args: argparse.Namespace) -> Command:
    if args.cmd == "login":
        return Login(server_url=resolve_server_url(args.server_url))
    if args.cmd == "register":
        return Register(server_url=resolve_server_url(args.server_url))
    if args.cmd == "logout":
        return Logout()

    if args.cmd == "app":
        if args.subcmd == "add":
            return AppAdd(app_name=args.app_name)
        if args.subcmd in ("list", "ls"):
            return AppList(format=args.format)
        if args.subcmd in ("remove", "rm"):
            return AppRemove(app_name=args.app_name)
        if args.subcmd == "rename":
            return AppRename(current_app_name=args.current_app_name, new_app_name=args.new_app_name)

    if args.cmd == "deployment":
        if args.subcmd == "add":
            return DeploymentAdd(app_name=args.app_name, deployment_name=args.deployment_name)
        if args.subcmd in ("list", "ls"):
            return DeploymentList(app_name=args.app_name, format=args.format, verbose=args.verbose)
        if args.subcmd in ("remove", "rm"):
            return DeploymentRemove(app_name=args.app_name, deployment_name=args.deployment_name)
        if args.subcmd == "rename":
            return DeploymentRename(
                app_name=args.app_name,
                current_deployment_name=args.current_deployment_name,
                new_deployment_name=args.new_deployment_name,
            )

    if args.cmd == "deployment-key" and args.subcmd in ("list", "ls"):
        return DeploymentKeyList(app_name=args.app_name, deployment_name=args.deployment_name, format=args.format)

    if args.cmd == "access-key":
        if args.subcmd in ("list", "ls"):
            return AccessKeyList(format=args.format)
        if args.subcmd in ("remove", "rm"):
            return AccessKeyRemove(access_key_name=args.access_key_name)

    if args.cmd == "deploy":
        return Deploy(
            app_name=args.app_name,
            deployment_name=args.deployment_name,
            package_path=args.package,
            min_app_version=args.min_app_version,
            description=args.description,
            mandatory=args.mandatory,
        )

    raise AssertionError("unreachable")


def _http_error_detail(body: str) -> str | None:
    text = body.strip()
    if not text:
        return None
    try:
        obj = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(obj, dict):
        for key in ("message", "detail", "error"):
            value = obj.get(key)
            if isinstance(value, str):
                value = value.strip()
                if value:
                    return value
    return text


def format_http_error(err: ReleaseDockHTTPError) -> str:
    detail = _http_error_detail(err.body)
    if err.status_code == 401:
        base = "HTTP 401 Unauthorized. Your session is missing or expired; run `releasedock login`."
    elif err.status_code == 403:
        base = "HTTP 403 Forbidden. You are authenticated but not allowed to access this resource."
    elif err.status_code == 404:
        base = "HTTP 404 Not Found. Resource does not exist or is not visible to your account."
    elif err.status_code == 409:
        base = "HTTP 409 Conflict."
    else:
        base = f"HTTP {err.status_code}"
    if detail:
        return f"{base} {detail}"
    return base


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    ctx = ExecutionContext(timeout_s=resolve_timeout_s(args.timeout_s))
    try:
        execute(command_from_args(args), ctx)
        return 0
    except ReleaseDockHTTPError as e:
        print(f"error: {format_http_error(e)}", file=sys.stderr)
        return 1
    except ReleaseDockError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
