# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from pydantic import BaseModel, Field

from openapi_provider.core.datatypes import (
    BackendConfiguration,
    HeaderParameter,
    ResourceDescriptor,
    SecurityDefinition,
    SecuritySchemes,
)


class InMemorySpecModel(BaseModel):
    """Spec model over data that has already been parsed out of an API document."""

    backend_configuration: BackendConfiguration
    global_security_schemes: SecuritySchemes = Field(default_factory=SecuritySchemes)
    security_definitions: list[SecurityDefinition] = Field(default_factory=list)
    header_parameters: list[HeaderParameter] = Field(default_factory=list)
    resources: list[ResourceDescriptor] = Field(default_factory=list)
    data_sources: list[ResourceDescriptor] = Field(default_factory=list)

    def get_backend_configuration(self) -> BackendConfiguration:
        return self.backend_configuration

    def get_global_security_schemes(self) -> SecuritySchemes:
        return self.global_security_schemes

    def get_api_key_security_definitions(self) -> list[SecurityDefinition]:
        return list(self.security_definitions)

    def get_header_parameters(self) -> list[HeaderParameter]:
        return list(self.header_parameters)

    def get_resources(self) -> list[ResourceDescriptor]:
        return list(self.resources)

    def get_data_sources(self) -> list[ResourceDescriptor]:
        return list(self.data_sources)
