from enum import Enum

from pydantic import BaseModel


class OsFamily(str, Enum):
    DEBIAN = "debian"
    REDHAT = "redhat"


class PackageManagerKind(str, Enum):
    APT = "apt"
    YUM = "yum"
    DNF = "dnf"


class SystemProfile(BaseModel, frozen=True):
    """Host operating system facts, detected once and passed explicitly."""

    os_id: str
    version: str
    codename: str = ""
    family: OsFamily
    package_manager: PackageManagerKind
    service_manager: str = "systemctl"

    @property
    def major_version(self) -> int | None:
        head = self.version.split(".", 1)[0]
        return int(head) if head.isdigit() else None
