import re
import shlex
from pathlib import Path

from loguru import logger

from execwrap.domain.value_objects.system_profile import (
    OsFamily,
    PackageManagerKind,
    SystemProfile,
)

OS_RELEASE_PATH = Path("/etc/os-release")
REDHAT_RELEASE_PATH = Path("/etc/redhat-release")

DEBIAN_IDS = frozenset({"ubuntu", "debian"})
REDHAT_IDS = frozenset({"centos", "rhel", "fedora", "rocky", "almalinux"})

# First RedHat-family major version that ships dnf
DNF_MIN_MAJOR = 8

_REDHAT_VERSION = re.compile(r"release\s+(\d+(?:\.\d+)*)")


class UnsupportedSystemError(Exception):
    """Raised when the host OS cannot be detected or is not supported."""


def parse_os_release(text: str) -> dict[str, str]:
    """Parse KEY=VALUE lines of an os-release file, unquoting values."""
    fields: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def _family_for(os_id: str, id_like: str) -> OsFamily:
    candidates = [os_id, *id_like.split()]
    for candidate in candidates:
        if candidate in DEBIAN_IDS:
            return OsFamily.DEBIAN
        if candidate in REDHAT_IDS:
            return OsFamily.REDHAT
    raise UnsupportedSystemError(f"Unsupported operating system: {os_id or 'unknown'}")


def build_profile(os_id: str, version: str, codename: str = "", id_like: str = "") -> SystemProfile:
    family = _family_for(os_id, id_like)
    if family == OsFamily.DEBIAN:
        manager = PackageManagerKind.APT
    else:
        head = version.split(".", 1)[0]
        manager = (
            PackageManagerKind.DNF
            if head.isdigit() and int(head) >= DNF_MIN_MAJOR
            else PackageManagerKind.YUM
        )
    return SystemProfile(
        os_id=os_id,
        version=version,
        codename=codename,
        family=family,
        package_manager=manager,
    )


def detect_system_profile(
    os_release_path: Path = OS_RELEASE_PATH,
    redhat_release_path: Path = REDHAT_RELEASE_PATH,
) -> SystemProfile:
    """Detect the host OS from os-release, falling back on redhat-release."""
    if os_release_path.is_file():
        fields = parse_os_release(os_release_path.read_text(encoding="utf-8"))
        profile = build_profile(
            os_id=fields.get("ID", "").lower(),
            version=fields.get("VERSION_ID", ""),
            codename=fields.get("VERSION_CODENAME", ""),
            id_like=fields.get("ID_LIKE", "").lower(),
        )
    elif redhat_release_path.is_file():
        match = _REDHAT_VERSION.search(redhat_release_path.read_text(encoding="utf-8"))
        profile = build_profile(os_id="rhel", version=match.group(1) if match else "")
    else:
        raise UnsupportedSystemError("Cannot detect operating system")

    logger.info(
        "Detected: {} {} (Package Manager: {})",
        profile.os_id,
        profile.version,
        profile.package_manager.value,
    )
    return profile
