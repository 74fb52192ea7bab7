from abc import ABC, abstractmethod

from execwrap.domain.value_objects.invocation import Invocation
from execwrap.domain.value_objects.system_profile import (
    OsFamily,
    PackageManagerKind,
    SystemProfile,
)


def _require_packages(packages: list[str]) -> list[str]:
    if not packages:
        raise ValueError("At least one package name is required")
    return packages


class PackageManager(ABC):
    """Builds package manager invocations for one OS family."""

    kind: PackageManagerKind

    @abstractmethod
    def update_cache_command(self) -> Invocation: ...

    @abstractmethod
    def install_command(self, packages: list[str]) -> Invocation: ...

    @abstractmethod
    def remove_command(self, packages: list[str]) -> Invocation: ...

    @abstractmethod
    def is_installed_command(self, package: str) -> Invocation: ...


class AptPackageManager(PackageManager):
    kind = PackageManagerKind.APT

    def update_cache_command(self) -> Invocation:
        return Invocation(argv=("apt-get", "update"))

    def install_command(self, packages: list[str]) -> Invocation:
        return Invocation(
            argv=("apt-get", "install", "-y", *_require_packages(packages)),
            env={"DEBIAN_FRONTEND": "noninteractive"},
        )

    def remove_command(self, packages: list[str]) -> Invocation:
        return Invocation(argv=("apt-get", "remove", "-y", *_require_packages(packages)))

    def is_installed_command(self, package: str) -> Invocation:
        return Invocation(argv=("dpkg", "-s", package))


class YumPackageManager(PackageManager):
    """yum and dnf share their command surface."""

    def __init__(self, kind: PackageManagerKind = PackageManagerKind.YUM) -> None:
        if kind not in (PackageManagerKind.YUM, PackageManagerKind.DNF):
            raise ValueError(f"{kind.value} is not an rpm package manager")
        self.kind = kind

    def update_cache_command(self) -> Invocation:
        return Invocation(argv=(self.kind.value, "makecache"))

    def install_command(self, packages: list[str]) -> Invocation:
        return Invocation(argv=(self.kind.value, "install", "-y", *_require_packages(packages)))

    def remove_command(self, packages: list[str]) -> Invocation:
        return Invocation(argv=(self.kind.value, "remove", "-y", *_require_packages(packages)))

    def is_installed_command(self, package: str) -> Invocation:
        return Invocation(argv=("rpm", "-q", package))


def package_manager_for(profile: SystemProfile) -> PackageManager:
    if profile.family == OsFamily.DEBIAN:
        return AptPackageManager()
    return YumPackageManager(profile.package_manager)
