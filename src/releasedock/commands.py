"""
Typed command values produced by the CLI front end and consumed by ``executor.execute``.

Each command kind is its own frozen dataclass carrying only the fields it needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Login:
    server_url: str


@dataclass(frozen=True)
class Register:
    server_url: str


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class AccessKeyList:
    format: str = "table"


@dataclass(frozen=True)
class AccessKeyRemove:
    access_key_name: str


@dataclass(frozen=True)
class AppAdd:
    app_name: str


@dataclass(frozen=True)
class AppList:
    format: str = "table"


@dataclass(frozen=True)
class AppRemove:
    app_name: str


@dataclass(frozen=True)
class AppRename:
    current_app_name: str
    new_app_name: str


@dataclass(frozen=True)
class Deploy:
    app_name: str
    deployment_name: str
    package_path: str
    min_app_version: str
    description: str | None = None
    mandatory: bool = False


@dataclass(frozen=True)
class DeploymentAdd:
    app_name: str
    deployment_name: str


@dataclass(frozen=True)
class DeploymentKeyList:
    app_name: str
    deployment_name: str
    format: str = "table"


@dataclass(frozen=True)
class DeploymentList:
    app_name: str
    format: str = "table"
    verbose: bool = False


@dataclass(frozen=True)
class DeploymentRemove:
    app_name: str
    deployment_name: str


@dataclass(frozen=True)
class DeploymentRename:
    app_name: str
    current_deployment_name: str
    new_deployment_name: str


AUTH_COMMANDS = (Login, Register, Logout)

Command = Union[
    Login,
    Register,
    Logout,
    AccessKeyList,
    AccessKeyRemove,
    AppAdd,
    AppList,
    AppRemove,
    AppRename,
    Deploy,
    DeploymentAdd,
    DeploymentKeyList,
    DeploymentList,
    DeploymentRemove,
    DeploymentRename,
]
