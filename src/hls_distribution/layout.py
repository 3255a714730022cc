"""Deterministic mapping of distributed elements to paths and public URLs.

Every function here is pure. Distribution and retraction compute the element
directory independently, so both must derive the playlist name the same way:
the source file name is kept whole (extension included) and ``.m3u8`` is
appended, e.g. ``media.mov`` becomes ``media.mov.m3u8``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import quote, unquote, urlsplit

from .domain.models import Element, Package
from .exceptions import ValidationError

PLAYLIST_SUFFIX = ".m3u8"


def base_file_name(uri: str) -> str:
    """Return the file name of ``uri`` without any directory components."""

    path = urlsplit(uri).path if "://" in uri else uri
    name = unquote(PurePosixPath(path.replace("\\", "/")).name)
    if not name:
        raise ValidationError(f"Cannot derive a file name from '{uri}'")
    return name


def _checked(segment: str | None, *, label: str) -> str:
    if not segment:
        raise ValidationError(f"{label} must be specified")
    if segment in {".", ".."} or "/" in segment or "\\" in segment:
        raise ValidationError(f"{label} '{segment}' is not a valid path segment")
    return segment


def package_directory(root: Path, package_id: str) -> Path:
    return Path(root) / _checked(package_id, label="Package ID")


def element_directory(root: Path, package_id: str, element_id: str) -> Path:
    return package_directory(root, package_id) / _checked(element_id, label="Element ID")


def destination_path(root: Path, package_id: str, element_id: str, base_name: str) -> Path:
    """``{root}/{package_id}/{element_id}/{base_name}.m3u8``"""

    name = _checked(base_name, label="File name")
    return element_directory(root, package_id, element_id) / f"{name}{PLAYLIST_SUFFIX}"


def public_uri(base_url: str, package_id: str, element_id: str, base_name: str) -> str:
    """``{base_url}/{package_id}/{element_id}/{base_name}.m3u8``"""

    segments = (
        _checked(package_id, label="Package ID"),
        _checked(element_id, label="Element ID"),
        _checked(base_name, label="File name") + PLAYLIST_SUFFIX,
    )
    return "/".join([base_url.rstrip("/"), *(quote(segment) for segment in segments)])


@dataclass(frozen=True, slots=True)
class DistributionLayout:
    """Bundles the distribution root and the public base URL."""

    root: Path
    base_url: str

    def element_directory(self, package: Package, element: Element) -> Path:
        return element_directory(self.root, package.id, self._element_key(element))

    def package_directory(self, package: Package) -> Path:
        return package_directory(self.root, package.id)

    def destination_path(self, package: Package, element: Element) -> Path:
        return destination_path(
            self.root, package.id, self._element_key(element), base_file_name(element.uri)
        )

    def public_uri(self, package: Package, element: Element) -> str:
        return public_uri(
            self.base_url, package.id, self._element_key(element), base_file_name(element.uri)
        )

    @staticmethod
    def _element_key(element: Element) -> str:
        key = element.layout_id
        if key is None:
            raise ValidationError("Element ID must be specified")
        return key


__all__ = [
    "PLAYLIST_SUFFIX",
    "DistributionLayout",
    "base_file_name",
    "destination_path",
    "element_directory",
    "package_directory",
    "public_uri",
]
