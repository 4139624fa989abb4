# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import pytest

from openapi_provider.core.datatypes import (
    BackendConfiguration,
    DescriptorKind,
    HeaderParameter,
    Operation,
    PropertyKind,
    ResourceDescriptor,
    ResourceSchema,
    SchemaProperty,
    SecurityDefinition,
    SecuritySchemes,
)
from openapi_provider.core.service_config import ServiceConfiguration
from openapi_provider.core.spec_model import InMemorySpecModel

CRUD = frozenset({Operation.create, Operation.read, Operation.update, Operation.delete})


def widget_schema() -> ResourceSchema:
    return ResourceSchema(
        properties=[
            SchemaProperty(name="id", read_only=True),
            SchemaProperty(name="label", required=True),
            SchemaProperty(name="size", kind=PropertyKind.integer),
            SchemaProperty(name="tags", kind=PropertyKind.array, items=PropertyKind.string),
        ]
    )


@pytest.fixture
def make_resource():
    def _make(
        path: str,
        name: str = "",
        preferred_name: str | None = None,
        ignore: bool = False,
        operations: frozenset[Operation] = CRUD,
        resource_schema: ResourceSchema | None = None,
    ) -> ResourceDescriptor:
        return ResourceDescriptor(
            name=name or path.strip("/").split("/")[-1],
            path=path,
            preferred_name=preferred_name,
            ignore=ignore,
            operations=operations,
            resource_schema=resource_schema or widget_schema(),
        )

    return _make


@pytest.fixture
def make_data_source():
    def _make(path: str, name: str = "", preferred_name: str | None = None) -> ResourceDescriptor:
        descriptor = ResourceDescriptor(
            name=name or path.strip("/").split("/")[-1],
            path=path,
            preferred_name=preferred_name,
            operations=frozenset({Operation.list}),
            resource_schema=widget_schema(),
        )
        if descriptor.is_sub_resource:
            descriptor = descriptor.model_copy(update={"kind": DescriptorKind.sub_resource_data_source})
        else:
            descriptor = descriptor.model_copy(update={"kind": DescriptorKind.data_source})
        return descriptor

    return _make


@pytest.fixture
def spec_model(make_resource):
    return InMemorySpecModel(
        backend_configuration=BackendConfiguration(host="localhost:8443", base_path="/api"),
        global_security_schemes=SecuritySchemes(names=["apikey_auth"]),
        security_definitions=[SecurityDefinition(name="apikey_auth", parameter_name="Authorization")],
        header_parameters=[HeaderParameter(name="header_name")],
        resources=[make_resource("/v1/resource", preferred_name="resource")],
    )


@pytest.fixture
def service_configuration():
    return ServiceConfiguration()
