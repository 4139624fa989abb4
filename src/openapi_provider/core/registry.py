# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import time
from dataclasses import dataclass, field

from openapi_provider.core.datatypes import CollisionReport, DataSourceDefinition, ResourceDefinition
from openapi_provider.core.factories import (
    DefaultDataSourceFactory,
    DefaultResourceFactory,
    InstanceDataSourceFactory,
)
from openapi_provider.core.naming import NamingResolver
from openapi_provider.core.protocols import DataSourceFactory, ResourceFactory, SpecModel
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::registry")


@dataclass
class Registries:
    resources: dict[str, ResourceDefinition] = field(default_factory=dict)
    data_sources: dict[str, DataSourceDefinition] = field(default_factory=dict)
    collisions: list[CollisionReport] = field(default_factory=list)


class RegistryBuilder:
    def __init__(
        self,
        provider_name: str,
        spec_model: SpecModel,
        resource_factory: ResourceFactory | None = None,
        data_source_factory: DataSourceFactory | None = None,
    ):
        self.provider_name = provider_name
        self.spec_model = spec_model
        self.resource_factory = resource_factory or DefaultResourceFactory(provider_name)
        self.data_source_factory = data_source_factory or DefaultDataSourceFactory(provider_name)
        self.instance_factory = InstanceDataSourceFactory(provider_name)
        self.naming = NamingResolver(provider_name)

    def build_resources(
        self,
    ) -> tuple[dict[str, ResourceDefinition], dict[str, DataSourceDefinition], list[CollisionReport]]:
        """Register every resource along with its ``_instance`` data source."""
        resources: dict[str, ResourceDefinition] = {}
        instances: dict[str, DataSourceDefinition] = {}

        naming = self.naming.resolve(self.spec_model.get_resources())
        for name, descriptor in naming.entries.items():
            start = time.monotonic()
            resource = self.resource_factory.create_resource(name, descriptor)
            resources[name] = resource
            logger.info(
                f"resource '{name}' successfully registered in the provider (time:{time.monotonic() - start:.4f}s)"
            )

            # the instance is a read-only subset of the resource, it cannot fail where the resource did not
            instance = self.instance_factory.create_instance_data_source(resource, descriptor)
            instances[instance.name] = instance
            logger.info(
                f"data source instance '{instance.name}' successfully registered in the provider "
                f"(time:{time.monotonic() - start:.4f}s)"
            )

        return resources, instances, naming.collisions

    def build_data_sources(self) -> tuple[dict[str, DataSourceDefinition], list[CollisionReport]]:
        data_sources: dict[str, DataSourceDefinition] = {}

        naming = self.naming.resolve(self.spec_model.get_data_sources())
        for name, descriptor in naming.entries.items():
            start = time.monotonic()
            data_sources[name] = self.data_source_factory.create_data_source(name, descriptor)
            logger.info(
                f"data source '{name}' successfully registered in the provider (time:{time.monotonic() - start:.4f}s)"
            )
        return data_sources, naming.collisions

    def build(self) -> Registries:
        resources, instances, resource_collisions = self.build_resources()
        data_sources, data_source_collisions = self.build_data_sources()

        merged = dict(instances)
        for name, data_source in data_sources.items():
            if name in merged:
                logger.debug(f"data source '{name}' replaces the instance data source of the same name")
            merged[name] = data_source

        return Registries(
            resources=resources,
            data_sources=merged,
            collisions=resource_collisions + data_source_collisions,
        )
