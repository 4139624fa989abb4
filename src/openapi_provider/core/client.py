# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from collections.abc import Generator
from typing import Any

import httpx

from openapi_provider.core.datatypes import (
    BackendConfiguration,
    ClientContext,
    SecurityContext,
    SecurityLocation,
    SecuritySchemes,
)
from openapi_provider.core.errors import MissingSecurityValueError
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::client")


class APIKeyAuth(httpx.Auth):
    """Injects API keys into the header or query string of outgoing requests."""

    def __init__(self, contexts: list[SecurityContext]):
        self.contexts = contexts

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        for context in self.contexts:
            if context.location == SecurityLocation.query:
                request.url = request.url.copy_merge_params({context.parameter_name: context.value})
            else:
                request.headers[context.parameter_name] = context.value
        yield request


class APIAuthenticator:
    def __init__(self, global_schemes: SecuritySchemes):
        self.global_schemes = global_schemes

    def auth_for(self, context: ClientContext, schemes: list[str] | None = None) -> APIKeyAuth:
        """Build the auth for an operation; ``schemes`` overrides the global requirement."""
        by_scheme = {security.scheme: security for security in context.security.values()}
        selected = []
        for scheme in schemes if schemes is not None else self.global_schemes.names:
            security = by_scheme.get(scheme)
            if security is None or not security.value:
                raise MissingSecurityValueError(scheme)
            selected.append(security)
        return APIKeyAuth(selected)


class ProviderClient:
    """Client object handed to the operation executor once the provider is configured."""

    def __init__(
        self,
        backend_configuration: BackendConfiguration,
        authenticator: APIAuthenticator,
        http_client: httpx.Client,
        context: ClientContext,
    ):
        self.backend_configuration = backend_configuration
        self.authenticator = authenticator
        self.http_client = http_client
        self.context = context

    def host_for(self, resource_name: str) -> str:
        override = self.context.endpoints.get(resource_name)
        if override:
            logger.debug(f"resource '{resource_name}' is configured to use the endpoint override '{override}'")
            return override
        return self.backend_configuration.resolve_host(self.context.region)

    def base_url_for(self, resource_name: str) -> str:
        base_path = self.backend_configuration.base_path.rstrip("/")
        return f"{self.backend_configuration.preferred_scheme}://{self.host_for(resource_name)}{base_path}"

    def request(
        self, method: str, resource_name: str, path: str, schemes: list[str] | None = None, **kwargs: Any
    ) -> httpx.Response:
        headers = {**self.context.wire_headers(), **kwargs.pop("headers", {})}
        return self.http_client.request(
            method,
            f"{self.base_url_for(resource_name)}{path}",
            headers=headers,
            auth=self.authenticator.auth_for(self.context, schemes),
            **kwargs,
        )

    def close(self) -> None:
        self.http_client.close()

    def __enter__(self) -> "ProviderClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
