"""Workspace packages and their manifests."""

from __future__ import annotations

from monorepo_release.project.inventory import discover_packages, update_package_version
from monorepo_release.project.models import Package

__all__ = ["Package", "discover_packages", "update_package_version"]
