"""
Name -> id lookups over the service's entity listings.

The ``find_*``/``resolve_*`` functions return None when nothing matches; the
``require_*`` helpers turn a miss into ``NotFoundError`` for mutating commands.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from .client import ReleaseDockError, ServiceClient
from .models import AccessKey, App, Deployment

T = TypeVar("T", App, Deployment, AccessKey)


class NotFoundError(ReleaseDockError):
    pass


def _first_named(items: Iterable[T], name: str) -> T | None:
    for item in items:
        if item.name == name:
            return item
    return None


def find_app(client: ServiceClient, app_name: str) -> App | None:
    return _first_named(client.get_apps(), app_name)


def find_deployment(client: ServiceClient, app_id: str, deployment_name: str) -> Deployment | None:
    return _first_named(client.get_deployments(app_id), deployment_name)


def find_access_key(client: ServiceClient, access_key_name: str) -> AccessKey | None:
    return _first_named(client.get_access_keys(), access_key_name)


def resolve_app_id(client: ServiceClient, app_name: str) -> str | None:
    app = find_app(client, app_name)
    return app.id if app else None


def resolve_deployment_id(client: ServiceClient, app_id: str, deployment_name: str) -> str | None:
    deployment = find_deployment(client, app_id, deployment_name)
    return deployment.id if deployment else None


def resolve_access_key_id(client: ServiceClient, access_key_name: str) -> str | None:
    access_key = find_access_key(client, access_key_name)
    return access_key.id if access_key else None


def _app_missing(app_name: str) -> NotFoundError:
    return NotFoundError(f'App "{app_name}" does not exist.')


def _deployment_missing(deployment_name: str, app_name: str) -> NotFoundError:
    return NotFoundError(f'Deployment "{deployment_name}" does not exist for app "{app_name}".')


def require_app(client: ServiceClient, app_name: str) -> App:
    app = find_app(client, app_name)
    if app is None:
        raise _app_missing(app_name)
    return app


def require_app_id(client: ServiceClient, app_name: str) -> str:
    app_id = resolve_app_id(client, app_name)
    if not app_id:
        raise _app_missing(app_name)
    return app_id


def require_deployment(client: ServiceClient, app_id: str, deployment_name: str, *, app_name: str) -> Deployment:
    deployment = find_deployment(client, app_id, deployment_name)
    if deployment is None:
        raise _deployment_missing(deployment_name, app_name)
    return deployment


def require_deployment_id(client: ServiceClient, app_id: str, deployment_name: str, *, app_name: str) -> str:
    deployment_id = resolve_deployment_id(client, app_id, deployment_name)
    if not deployment_id:
        raise _deployment_missing(deployment_name, app_name)
    return deployment_id


def require_access_key_id(client: ServiceClient, access_key_name: str) -> str:
    access_key_id = resolve_access_key_id(client, access_key_name)
    if not access_key_id:
        raise NotFoundError(f'Access key "{access_key_name}" does not exist.')
    return access_key_id
