from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

import docker
import requests
from docker.errors import DockerException

from .auth import AuthConfig
from .context import create_context
from .errors import EngineError


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "unix:///var/run/docker.sock"
DEFAULT_API_VERSION = "1.28"

_ENGINE_ERRORS = (DockerException, requests.exceptions.RequestException)


class EngineClient:
    """The subset of the Docker Engine API used to build and publish images.

    Wraps the low-level `docker.APIClient` and carries the registry
    credentials used for pushes.
    """

    def __init__(self, api: Any, auth_config: Optional[AuthConfig] = None) -> None:
        self.api = api
        self.auth_config = auth_config or AuthConfig()

    @classmethod
    def connect(
        cls,
        auth_config: AuthConfig,
        version: str = DEFAULT_API_VERSION,
        base_url: str = DEFAULT_BASE_URL,
    ) -> EngineClient:
        try:
            api = docker.APIClient(base_url=base_url, version=version)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to create Docker client for {base_url}: {e}") from e
        logger.info(f"Using Docker engine at {base_url} (API {version})")
        return cls(api, auth_config)

    def build(self, dockerfile: str, tags: List[str]) -> Iterator[bytes]:
        """Submit a build of `dockerfile` and return its progress stream.

        Base images are always pulled, the layer cache is never used and
        intermediate containers are removed even when the build fails. The
        archived context is deleted before returning.
        """
        with create_context(dockerfile) as ctx:
            try:
                return self.api.build(
                    fileobj=ctx.fileobj,
                    custom_context=True,
                    encoding="gzip",
                    tag=tags[0] if tags else None,
                    pull=True,
                    nocache=True,
                    rm=True,
                    forcerm=True,
                    decode=False,
                )
            except _ENGINE_ERRORS as e:
                raise EngineError(f"Failed to stage build {dockerfile}: {e}") from e

    def tag(self, image: str, name: str) -> None:
        repository, tag = docker.utils.parse_repository_tag(name)
        try:
            self.api.tag(image, repository, tag=tag)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to tag {image} as {name}: {e}") from e

    def push(self, name: str) -> Iterator[bytes]:
        """Push `name` to its registry and return the progress stream."""
        # Encoding first surfaces credential problems before any network call
        self.auth_config.value()
        if not self.auth_config.has_credentials():
            logger.info(f"Pushing {name} without username/password")
        repository, tag = docker.utils.parse_repository_tag(name)
        try:
            return self.api.push(
                repository,
                tag=tag,
                stream=True,
                auth_config=self.auth_config.as_dict(),
                decode=False,
            )
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to push tag {name}: {e}") from e

    def inspect(self, image: str) -> Dict[str, Any]:
        try:
            return self.api.inspect_image(image)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to inspect image {image}: {e}") from e

    def remove(self, image: str) -> None:
        try:
            self.api.remove_image(image, force=True)
        except _ENGINE_ERRORS as e:
            raise EngineError(f"Failed to remove image {image}: {e}") from e

    def close(self) -> None:
        self.api.close()
