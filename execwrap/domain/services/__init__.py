from execwrap.domain.services.artifact_naming import (
    ArtifactNamer,
    ArtifactPaths,
    default_image_prefix,
    default_prefix,
    sanitize_prefix,
    timestamp_line,
)

__all__ = [
    "ArtifactNamer",
    "ArtifactPaths",
    "default_image_prefix",
    "default_prefix",
    "sanitize_prefix",
    "timestamp_line",
]
