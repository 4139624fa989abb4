# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from openapi_provider.core.assembler import ConfigurationAssembler
from openapi_provider.core.configuration_schema import ConfigurationSchemaBuilder
from openapi_provider.core.datatypes import ProviderDefinition, ResourceDefinition
from openapi_provider.core.errors import ProviderConfigError
from openapi_provider.core.protocols import DataSourceFactory, ResourceFactory, ServiceConfiguration, SpecModel
from openapi_provider.core.registry import RegistryBuilder
from openapi_provider.core.utils.names import to_compliant_name
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core")


class ProviderFactory:
    """Assembles a ``ProviderDefinition`` out of a spec model and a service configuration.

    Assembly is all-or-nothing: any error raised by the spec model, the service
    configuration or a factory aborts ``create_provider``. Naming collisions are
    the only tolerated failure; they are dropped and reported on the definition.
    """

    def __init__(
        self,
        name: str,
        spec_model: SpecModel | None,
        service_configuration: ServiceConfiguration | None,
        resource_factory: ResourceFactory | None = None,
        data_source_factory: DataSourceFactory | None = None,
    ):
        if not name:
            raise ProviderConfigError("provider name not specified")
        compliant_name = to_compliant_name(name)
        if name != compliant_name:
            raise ProviderConfigError(
                f"provider name '{name}' not name compliant, please consider renaming provider to '{compliant_name}'"
            )
        if spec_model is None:
            raise ProviderConfigError("provider missing a spec model")
        if service_configuration is None:
            raise ProviderConfigError("provider missing the service configuration")

        self.name = name
        self.spec_model = spec_model
        self.service_configuration = service_configuration
        self.resource_factory = resource_factory
        self.data_source_factory = data_source_factory

    def get_resource_names(self, resources: dict[str, ResourceDefinition]) -> list[str]:
        """Resource names without the provider prefix, used for the endpoints block."""
        return [name.replace(f"{self.name}_", "", 1) for name in resources]

    def create_provider(self) -> ProviderDefinition:
        backend_configuration = self.spec_model.get_backend_configuration()

        registries = RegistryBuilder(
            self.name,
            self.spec_model,
            resource_factory=self.resource_factory,
            data_source_factory=self.data_source_factory,
        ).build()

        configuration_schema = ConfigurationSchemaBuilder(self.spec_model, self.service_configuration).build(
            backend_configuration, self.get_resource_names(registries.resources)
        )

        assembler = ConfigurationAssembler(self.spec_model, backend_configuration, configuration_schema)

        logger.info(
            f"provider '{self.name}' assembled with {len(registries.resources)} resources and "
            f"{len(registries.data_sources)} data sources"
        )
        return ProviderDefinition(
            name=self.name,
            configuration_schema=configuration_schema,
            resources=registries.resources,
            data_sources=registries.data_sources,
            collisions=registries.collisions,
            configure=assembler.configure,
        )
