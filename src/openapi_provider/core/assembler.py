# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from collections.abc import Mapping
from typing import Any

import httpx

from openapi_provider.core.client import APIAuthenticator, ProviderClient
from openapi_provider.core.configuration_schema import ENDPOINTS_PROPERTY, REGION_PROPERTY
from openapi_provider.core.datatypes import (
    BackendConfiguration,
    ClientContext,
    ConfigurationProperty,
    HeaderValue,
    SecurityContext,
)
from openapi_provider.core.protocols import SpecModel
from openapi_provider.core.utils.config import redact_sensitive_fields
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::config")


class ConfigurationAssembler:
    """Turns user-supplied configuration values into a ``ProviderClient``.

    Values are looked up by their configuration (compliant) name. Header values
    are bound to the literal wire header name and security values to the
    scheme's location, so downstream code never sees the configuration keys.
    Values were already validated against the configuration schema by the host
    tool; nothing is re-validated here.
    """

    def __init__(
        self,
        spec_model: SpecModel,
        backend_configuration: BackendConfiguration,
        configuration_schema: dict[str, ConfigurationProperty],
    ):
        self.spec_model = spec_model
        self.backend_configuration = backend_configuration
        self.configuration_schema = configuration_schema

    def effective_values(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Fill in schema defaults for properties the user left unset."""
        result = dict(values)
        for name, prop in self.configuration_schema.items():
            if result.get(name) in (None, "") and prop.default is not None:
                result[name] = prop.default
        return result

    def build_client_context(self, values: Mapping[str, Any]) -> ClientContext:
        values = self.effective_values(values)
        context = ClientContext(region=values.get(REGION_PROPERTY))

        for header in self.spec_model.get_header_parameters():
            name = header.configuration_name
            context.headers[name] = HeaderValue(name=header.name, value=values.get(name))

        for definition in self.spec_model.get_api_key_security_definitions():
            name = definition.configuration_name
            context.security[name] = SecurityContext(
                scheme=definition.name,
                location=definition.location,
                parameter_name=definition.parameter_name,
                value=values.get(name),
            )

        endpoints = values.get(ENDPOINTS_PROPERTY) or {}
        context.endpoints = {resource: host for resource, host in endpoints.items() if host}

        logger.debug(f"client context: {redact_sensitive_fields(context.model_dump(mode='json'))}")
        return context

    def configure(self, values: Mapping[str, Any]) -> ProviderClient:
        authenticator = APIAuthenticator(self.spec_model.get_global_security_schemes())
        context = self.build_client_context(values)
        # the transport is opened last so a failing spec model query leaves nothing to close
        return ProviderClient(
            backend_configuration=self.backend_configuration,
            authenticator=authenticator,
            http_client=httpx.Client(),
            context=context,
        )
