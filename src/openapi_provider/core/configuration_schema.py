# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from openapi_provider.core.datatypes import BackendConfiguration, ConfigurationProperty, PropertyKind
from openapi_provider.core.protocols import ServiceConfiguration, SpecModel
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::config")

REGION_PROPERTY = "region"
ENDPOINTS_PROPERTY = "endpoints"


def endpoints_property(resource_names: list[str]) -> ConfigurationProperty | None:
    """Nested block letting users point individual resources at a different host."""
    if not resource_names:
        return None
    return ConfigurationProperty(
        name=ENDPOINTS_PROPERTY,
        kind=PropertyKind.object,
        description="Override the host used for specific resources (e.g. a staging environment)",
        properties={
            name: ConfigurationProperty(name=name, description=f"Use this to override the resource endpoint for {name}")
            for name in resource_names
        },
    )


class ConfigurationSchemaBuilder:
    """Builds the provider-level configuration schema.

    The schema is made of an optional ``region`` property for multi-region
    backends, one property per API key security definition, one property per
    header parameter and the ``endpoints`` override block.
    """

    def __init__(self, spec_model: SpecModel, service_configuration: ServiceConfiguration):
        self.spec_model = spec_model
        self.service_configuration = service_configuration

    def build(
        self, backend_configuration: BackendConfiguration, resource_names: list[str]
    ) -> dict[str, ConfigurationProperty]:
        schema: dict[str, ConfigurationProperty] = {}

        is_multi_region, host, regions = backend_configuration.multi_region()
        if is_multi_region:
            logger.debug(
                f"service provider is configured with multi-region. API calls will be made against {host} and the "
                f"region provided by the user (or the default value otherwise, being the first element of supported "
                f"region list: {regions}), unless overridden by specific resources"
            )
            self._register(
                schema,
                ConfigurationProperty(
                    name=REGION_PROPERTY,
                    required=True,
                    default=regions[0],
                    allowed_values=regions,
                    description=f"Region the API calls are made against, one of {regions}",
                ),
            )

        global_schemes = self.spec_model.get_global_security_schemes()
        for definition in self.spec_model.get_api_key_security_definitions():
            self._register_from_service_configuration(
                schema,
                definition.configuration_name,
                required=global_schemes.contains(definition),
                sensitive=True,
            )

        headers = self.spec_model.get_header_parameters()
        logger.debug(f"all header parameters: {[header.name for header in headers]}")
        for header in headers:
            self._register_from_service_configuration(schema, header.configuration_name, required=False)

        endpoints = endpoints_property(resource_names)
        if endpoints is not None:
            schema[ENDPOINTS_PROPERTY] = endpoints

        return schema

    def _register_from_service_configuration(
        self, schema: dict[str, ConfigurationProperty], name: str, required: bool, sensitive: bool = False
    ) -> None:
        default = None
        property_configuration = self.service_configuration.get_schema_property_configuration(name)
        if property_configuration is not None:
            default = property_configuration.resolve()
        self._register(
            schema, ConfigurationProperty(name=name, required=required, default=default, sensitive=sensitive)
        )

    def _register(self, schema: dict[str, ConfigurationProperty], prop: ConfigurationProperty) -> None:
        schema[prop.name] = prop
        logger.debug(f"registered new property '{prop.name}' into provider schema")
