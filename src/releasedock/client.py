from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from .config import DEFAULT_SERVER_URL, DEFAULT_TIMEOUT_S
from .models import AccessKey, App, Deployment, DeploymentKey


class ReleaseDockError(RuntimeError):
    pass


class ServiceError(ReleaseDockError):
    pass


class AuthRequiredError(ReleaseDockError):
    pass


@dataclass(frozen=True)
class ReleaseDockHTTPError(ServiceError):
    status_code: int
    body: str

    def __str__(self) -> str:  # pragma: no cover
        return f"HTTP {self.status_code}: {self.body}"


class ServiceClient(Protocol):
    """The subset of the release service the command executor relies on."""

    def login_with_access_token(self, access_token: str) -> None: ...

    def logout(self) -> None: ...

    def get_apps(self) -> list[App]: ...

    def add_app(self, name: str, description: str | None = None) -> App: ...

    def remove_app(self, app_id: str) -> None: ...

    def update_app(self, app: App) -> None: ...

    def get_deployments(self, app_id: str) -> list[Deployment]: ...

    def add_deployment(self, app_id: str, name: str, description: str | None = None) -> Deployment: ...

    def remove_deployment(self, app_id: str, deployment_id: str) -> None: ...

    def update_deployment(self, app_id: str, deployment: Deployment) -> None: ...

    def get_deployment_keys(self, app_id: str, deployment_id: str) -> list[DeploymentKey]: ...

    def get_access_keys(self) -> list[AccessKey]: ...

    def remove_access_key(self, access_key_id: str) -> None: ...

    def add_package(
        self,
        app_id: str,
        deployment_id: str,
        file_path: Path,
        description: str | None,
        label: str | None,
        app_version: str,
        is_mandatory: bool,
    ) -> None: ...

    def close(self) -> None: ...


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _unwrap(obj: Any, key: str) -> Any:
    """
    Supports APIs that wrap payloads by entity name:
      {"apps": [...]}  or  {"app": {...}}
    """
    if isinstance(obj, dict) and key in obj:
        return obj[key]
    return obj


def _items(obj: Any, key: str) -> list[dict[str, Any]]:
    data = _unwrap(obj, key)
    if not isinstance(data, list):
        raise ServiceError(f"Unexpected response: expected a list of {key}.")
    return [x for x in data if isinstance(x, dict)]


def _entity(obj: Any, key: str) -> dict[str, Any]:
    data = _unwrap(obj, key)
    if not isinstance(data, dict):
        raise ServiceError(f"Unexpected response: expected a {key} object.")
    return data


class ReleaseClient:
    """
    HTTP client for the release management service.

    Authentication is established once per client with ``login_with_access_token``;
    the token (and any session cookie the server sets) is reused for later calls.
    """

    def __init__(self, *, server_url: str = DEFAULT_SERVER_URL, timeout_s: float = DEFAULT_TIMEOUT_S) -> None:
        self.server_url = server_url.rstrip("/")
        self.timeout_s = timeout_s
        self.access_token: str | None = None
        self._http = httpx.Client(timeout=timeout_s, follow_redirects=True)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "ReleaseClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def request(
        self,
        *,
        method: str,
        path: str,
        json_body: Any | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        auth: bool = True,
    ) -> httpx.Response:
        if not path.startswith("/"):
            path = "/" + path
        url = f"{self.server_url}{path}"

        headers: dict[str, str] = {"Accept": "application/json"}
        if auth and self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        try:
            resp = self._http.request(
                method.upper(),
                url,
                json=json_body,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise ServiceError(f"Request failed: {e}") from e

        if resp.status_code >= 400:
            raise ReleaseDockHTTPError(resp.status_code, resp.text)
        return resp

    def _json(self, resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise ServiceError(f"Unexpected non-JSON response from {resp.request.url}") from e

    # auth

    def login_with_access_token(self, access_token: str) -> None:
        self.request(
            method="POST",
            path="/auth/login/accessToken",
            data={"accessToken": access_token},
            auth=False,
        )
        self.access_token = access_token

    def logout(self) -> None:
        try:
            self.request(method="POST", path="/auth/logout")
        finally:
            self.access_token = None

    # apps

    def get_apps(self) -> list[App]:
        resp = self.request(method="GET", path="/apps")
        return [App.from_json(x) for x in _items(self._json(resp), "apps")]

    def add_app(self, name: str, description: str | None = None) -> App:
        body: dict[str, Any] = {"name": name}
        if description is not None:
            body["description"] = description
        resp = self.request(method="POST", path="/apps", json_body=body)
        return App.from_json(_entity(self._json(resp), "app"))

    def remove_app(self, app_id: str) -> None:
        self.request(method="DELETE", path=f"/apps/{_seg(app_id)}")

    def update_app(self, app: App) -> None:
        self.request(method="PUT", path=f"/apps/{_seg(app.id)}", json_body=app.to_json())

    # deployments

    def get_deployments(self, app_id: str) -> list[Deployment]:
        resp = self.request(method="GET", path=f"/apps/{_seg(app_id)}/deployments")
        return [Deployment.from_json(x) for x in _items(self._json(resp), "deployments")]

    def add_deployment(self, app_id: str, name: str, description: str | None = None) -> Deployment:
        body: dict[str, Any] = {"name": name}
        if description is not None:
            body["description"] = description
        resp = self.request(method="POST", path=f"/apps/{_seg(app_id)}/deployments", json_body=body)
        return Deployment.from_json(_entity(self._json(resp), "deployment"))

    def remove_deployment(self, app_id: str, deployment_id: str) -> None:
        self.request(method="DELETE", path=f"/apps/{_seg(app_id)}/deployments/{_seg(deployment_id)}")

    def update_deployment(self, app_id: str, deployment: Deployment) -> None:
        self.request(
            method="PUT",
            path=f"/apps/{_seg(app_id)}/deployments/{_seg(deployment.id)}",
            json_body=deployment.to_json(),
        )

    def get_deployment_keys(self, app_id: str, deployment_id: str) -> list[DeploymentKey]:
        resp = self.request(
            method="GET",
            path=f"/apps/{_seg(app_id)}/deployments/{_seg(deployment_id)}/deploymentKeys",
        )
        return [DeploymentKey.from_json(x) for x in _items(self._json(resp), "deploymentKeys")]

    # access keys

    def get_access_keys(self) -> list[AccessKey]:
        resp = self.request(method="GET", path="/accessKeys")
        return [AccessKey.from_json(x) for x in _items(self._json(resp), "accessKeys")]

    def remove_access_key(self, access_key_id: str) -> None:
        self.request(method="DELETE", path=f"/accessKeys/{_seg(access_key_id)}")

    # releases

    def add_package(
        self,
        app_id: str,
        deployment_id: str,
        file_path: Path,
        description: str | None,
        label: str | None,
        app_version: str,
        is_mandatory: bool,
    ) -> None:
        info: dict[str, Any] = {"appVersion": app_version, "isMandatory": bool(is_mandatory)}
        if description is not None:
            info["description"] = description
        if label is not None:
            info["label"] = label

        path = Path(file_path)
        with path.open("rb") as fh:
            self.request(
                method="PUT",
                path=f"/apps/{_seg(app_id)}/deployments/{_seg(deployment_id)}/package",
                data={"packageInfo": json.dumps(info, separators=(",", ":"))},
                files={"package": (path.name, fh, "application/octet-stream")},
            )
