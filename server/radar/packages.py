"""Packages tracked by the radar. Add entries here to extend tracking."""

from typing import Optional

from .models import PackageInfo

TRACKED_PACKAGES: tuple[PackageInfo, ...] = (
    PackageInfo(
        name="React",
        npm_name="react",
        github_repo="facebook/react",
        description="A JavaScript library for building user interfaces",
        icon="react",
    ),
    PackageInfo(
        name="Angular",
        npm_name="@angular/core",
        github_repo="angular/angular",
        description="Platform for building mobile and desktop web applications",
        icon="angular",
    ),
    PackageInfo(
        name="TypeScript",
        npm_name="typescript",
        github_repo="microsoft/TypeScript",
        description="TypeScript is a superset of JavaScript that compiles to clean JavaScript output",
        icon="typescript",
    ),
)


def get_package_by_name(name: str) -> Optional[PackageInfo]:
    """Find a package by display name or npm name, case-insensitively."""
    wanted = name.lower()
    for package in TRACKED_PACKAGES:
        if package.name.lower() == wanted or package.npm_name.lower() == wanted:
            return package
    return None

