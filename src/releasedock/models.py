from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any


def _opt_str(v: Any) -> str | None:
    if v is None:
        return None
    return str(v)


@dataclass(frozen=True)
class Package:
    app_version: str
    is_mandatory: bool
    package_hash: str
    description: str | None = None
    label: str | None = None
    size: int | None = None
    blob_url: str | None = None

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "Package":
        size = obj.get("size")
        return cls(
            app_version=str(obj.get("appVersion", "")),
            is_mandatory=bool(obj.get("isMandatory")),
            package_hash=str(obj.get("packageHash", "")),
            description=_opt_str(obj.get("description")),
            label=_opt_str(obj.get("label")),
            size=size if isinstance(size, int) and not isinstance(size, bool) else None,
            blob_url=_opt_str(obj.get("blobUrl")),
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "appVersion": self.app_version,
            "isMandatory": self.is_mandatory,
            "packageHash": self.package_hash,
        }
        for key, value in (
            ("description", self.description),
            ("label", self.label),
            ("size", self.size),
            ("blobUrl", self.blob_url),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class App:
    id: str
    name: str
    description: str | None = None

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "App":
        return cls(id=str(obj.get("id", "")), name=str(obj.get("name", "")), description=_opt_str(obj.get("description")))

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(frozen=True)
class Deployment:
    id: str
    name: str
    description: str | None = None
    package: Package | None = None

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "Deployment":
        pkg = obj.get("package")
        return cls(
            id=str(obj.get("id", "")),
            name=str(obj.get("name", "")),
            description=_opt_str(obj.get("description")),
            package=Package.from_json(pkg) if isinstance(pkg, dict) else None,
        )

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.description is not None:
            out["description"] = self.description
        if self.package is not None:
            out["package"] = self.package.to_json()
        return out


@dataclass(frozen=True)
class AccessKey:
    id: str
    name: str
    key: str | None = None

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "AccessKey":
        return cls(id=str(obj.get("id", "")), name=str(obj.get("name", "")), key=_opt_str(obj.get("key")))


@dataclass(frozen=True)
class DeploymentKey:
    id: str
    name: str
    key: str

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> "DeploymentKey":
        return cls(id=str(obj.get("id", "")), name=str(obj.get("name", "")), key=str(obj.get("key", "")))


@dataclass(frozen=True)
class PackageFile:
    """A file ready for upload. ``is_temporary`` means the caller must delete ``path``."""

    path: Path
    is_temporary: bool
