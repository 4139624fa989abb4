# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from openapi_provider.core.datatypes import (
    IDENTIFIER_PROPERTY,
    DataSourceDefinition,
    Operation,
    OperationBinding,
    PropertyKind,
    ResourceDefinition,
    ResourceDescriptor,
    SchemaProperty,
)
from openapi_provider.core.errors import FactoryError
from openapi_provider.core.naming import instance_name, parent_id_property_name, parent_names, qualified_name

FILTER_PROPERTY = "filter"

_HTTP_METHODS = {
    Operation.create: "POST",
    Operation.read: "GET",
    Operation.update: "PUT",
    Operation.delete: "DELETE",
    Operation.list: "GET",
}


def _instance_path(path: str) -> str:
    return f"{path.rstrip('/')}/{{{IDENTIFIER_PROPERTY}}}"


def bind(operation: Operation, path: str) -> OperationBinding:
    if operation == Operation.create or operation == Operation.list:
        target = path.rstrip("/") or "/"
    else:
        target = _instance_path(path)
    return OperationBinding(operation=operation, method=_HTTP_METHODS[operation], path=target)


def _check_property(descriptor: ResourceDescriptor, prop: SchemaProperty) -> None:
    if prop.kind == PropertyKind.array and prop.items is None:
        raise FactoryError(descriptor.name, f"array property '{prop.name}' does not declare its item kind")
    for nested in prop.properties:
        _check_property(descriptor, nested)


def as_computed(prop: SchemaProperty) -> SchemaProperty:
    """Copy of ``prop`` that is read back from the API only, nested properties included."""
    return prop.model_copy(
        update={
            "required": False,
            "computed": True,
            "properties": [as_computed(nested) for nested in prop.properties],
        }
    )


def identifier_property() -> SchemaProperty:
    return SchemaProperty(name=IDENTIFIER_PROPERTY, required=True)


def filter_property() -> SchemaProperty:
    return SchemaProperty(
        name=FILTER_PROPERTY,
        kind=PropertyKind.array,
        items=PropertyKind.object,
        properties=[
            SchemaProperty(name="name", required=True),
            SchemaProperty(name="values", kind=PropertyKind.array, items=PropertyKind.string, required=True),
        ],
        description="Narrow down the collection to the item matching every filter",
    )


class _ParentAwareFactory:
    def __init__(self, provider_name: str):
        self.provider_name = provider_name

    def parent_id_properties(self, descriptor: ResourceDescriptor) -> dict[str, SchemaProperty]:
        properties = {}
        for parent in parent_names(descriptor):
            name = parent_id_property_name(qualified_name(self.provider_name, parent))
            properties[name] = SchemaProperty(name=name, required=True)
        return properties


class DefaultResourceFactory(_ParentAwareFactory):
    """Synthesizes resource schemas and CRUD bindings straight from a descriptor."""

    def create_resource(self, name: str, descriptor: ResourceDescriptor) -> ResourceDefinition:
        if not (descriptor.supports(Operation.create) and descriptor.supports(Operation.read)):
            raise FactoryError(descriptor.name, "a resource must expose at least the create and read operations")

        schema = self.parent_id_properties(descriptor)
        for prop in descriptor.resource_schema.properties:
            _check_property(descriptor, prop)
            if prop.is_identifier:
                continue
            if prop.read_only:
                prop = as_computed(prop)
            schema[prop.name] = prop

        operations = {
            operation: bind(operation, descriptor.path)
            for operation in (Operation.create, Operation.read, Operation.update, Operation.delete)
            if descriptor.supports(operation)
        }
        return ResourceDefinition(name=name, path=descriptor.path, resource_schema=schema, operations=operations)


class DefaultDataSourceFactory(_ParentAwareFactory):
    """Synthesizes standalone data sources that look up one item of a collection."""

    def create_data_source(self, name: str, descriptor: ResourceDescriptor) -> DataSourceDefinition:
        if descriptor.supports(Operation.list):
            operation = Operation.list
        elif descriptor.supports(Operation.read):
            operation = Operation.read
        else:
            raise FactoryError(descriptor.name, "a data source must expose a list or read operation")

        schema = self.parent_id_properties(descriptor)
        for prop in descriptor.resource_schema.properties:
            _check_property(descriptor, prop)
            schema[prop.name] = as_computed(prop)
        schema.setdefault(FILTER_PROPERTY, filter_property())

        return DataSourceDefinition(
            name=name, path=descriptor.path, resource_schema=schema, read=bind(operation, descriptor.path)
        )


class InstanceDataSourceFactory(_ParentAwareFactory):
    """Derives the read-only ``<resource>_instance`` projection of a registered resource."""

    def create_instance_data_source(
        self, resource: ResourceDefinition, descriptor: ResourceDescriptor
    ) -> DataSourceDefinition:
        parent_ids = self.parent_id_properties(descriptor)
        schema = {IDENTIFIER_PROPERTY: identifier_property()}
        for prop_name, prop in resource.resource_schema.items():
            if prop_name in parent_ids:
                schema[prop_name] = parent_ids[prop_name]
            elif not prop.is_identifier:
                schema[prop_name] = as_computed(prop)

        return DataSourceDefinition(
            name=instance_name(resource.name),
            path=descriptor.path,
            resource_schema=schema,
            read=bind(Operation.read, descriptor.path),
            instance_of=resource.name,
        )
