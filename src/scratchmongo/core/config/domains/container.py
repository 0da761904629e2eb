"""Domain-specific configuration for the docker launch path."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig

DEFAULT_DOCKER_BINARY = "docker"
DEFAULT_IMAGE = "mongo:{version}"
DEFAULT_STARTUP_DELAY_SECONDS = 3.0


class ContainerConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "container"

    @cached_property
    def docker_binary(self) -> str:
        return str(self.section.get("docker_binary") or DEFAULT_DOCKER_BINARY)

    @cached_property
    def image_template(self) -> str:
        return str(self.section.get("image") or DEFAULT_IMAGE)

    @cached_property
    def startup_delay_seconds(self) -> float:
        raw = self.section.get("startup_delay_seconds")
        if raw is None:
            return DEFAULT_STARTUP_DELAY_SECONDS
        return max(0.0, float(raw))

    def image_for(self, version: str) -> str:
        """Render the image reference for ``version`` (e.g. ``mongo:6.0``)."""
        return self.image_template.format(version=version)


__all__ = ["ContainerConfig", "DEFAULT_DOCKER_BINARY", "DEFAULT_IMAGE", "DEFAULT_STARTUP_DELAY_SECONDS"]
