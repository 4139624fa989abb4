# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from typing import Protocol, runtime_checkable

from openapi_provider.core.datatypes import (
    BackendConfiguration,
    DataSourceDefinition,
    HeaderParameter,
    ResourceDefinition,
    ResourceDescriptor,
    SecurityDefinition,
    SecuritySchemes,
)


@runtime_checkable
class SpecModel(Protocol):
    """Read-only view over an already-parsed API document.

    Every query may raise; the engine propagates the error unchanged and
    aborts the assembly run.
    """

    def get_backend_configuration(self) -> BackendConfiguration: ...

    def get_global_security_schemes(self) -> SecuritySchemes: ...

    def get_api_key_security_definitions(self) -> list[SecurityDefinition]: ...

    def get_header_parameters(self) -> list[HeaderParameter]: ...

    def get_resources(self) -> list[ResourceDescriptor]: ...

    def get_data_sources(self) -> list[ResourceDescriptor]: ...


@runtime_checkable
class SchemaPropertyConfiguration(Protocol):
    def resolve(self) -> str:
        """Run the associated command (if any) and return the property's default value."""
        ...


@runtime_checkable
class ServiceConfiguration(Protocol):
    def get_schema_property_configuration(self, schema_property_name: str) -> SchemaPropertyConfiguration | None: ...


@runtime_checkable
class ResourceFactory(Protocol):
    def create_resource(self, name: str, descriptor: ResourceDescriptor) -> ResourceDefinition: ...


@runtime_checkable
class DataSourceFactory(Protocol):
    def create_data_source(self, name: str, descriptor: ResourceDescriptor) -> DataSourceDefinition: ...
