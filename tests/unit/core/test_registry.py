# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from unittest.mock import patch

import pytest

from openapi_provider.core.datatypes import (
    BackendConfiguration,
    DataSourceDefinition,
    Operation,
    PropertyKind,
    ResourceSchema,
    SchemaProperty,
)
from openapi_provider.core.errors import FactoryError, ProviderConfigError
from openapi_provider.core.factories import FILTER_PROPERTY, DefaultDataSourceFactory
from openapi_provider.core.registry import RegistryBuilder
from openapi_provider.core.spec_model import InMemorySpecModel


def _spec_model(resources=(), data_sources=()) -> InMemorySpecModel:
    return InMemorySpecModel(
        backend_configuration=BackendConfiguration(host="localhost"),
        resources=list(resources),
        data_sources=list(data_sources),
    )


class FailingDataSourceFactory:
    def create_data_source(self, name, descriptor):
        raise FactoryError(descriptor.name, "createTerraformDataSource failed")


class TestResources:
    def test_resource_and_instance_are_registered(self, make_resource):
        builder = RegistryBuilder("acme", _spec_model(resources=[make_resource("/v1/widgets")]))

        resources, instances, collisions = builder.build_resources()

        assert list(resources) == ["acme_widgets_v1"]
        assert list(instances) == ["acme_widgets_v1_instance"]
        assert collisions == []

    def test_resource_schema_and_bindings(self, make_resource):
        builder = RegistryBuilder("acme", _spec_model(resources=[make_resource("/v1/widgets")]))
        resources, _, _ = builder.build_resources()

        resource = resources["acme_widgets_v1"]
        assert "id" not in resource.resource_schema
        assert resource.resource_schema["label"].required is True
        assert resource.resource_schema["label"].computed is False
        assert set(resource.operations) == {Operation.create, Operation.read, Operation.update, Operation.delete}
        assert resource.binding(Operation.create).method == "POST"
        assert resource.binding(Operation.create).path == "/v1/widgets"
        assert resource.binding(Operation.delete).path == "/v1/widgets/{id}"
        assert resource.importable is True

    def test_instance_exposes_the_resource_as_computed(self, make_resource):
        builder = RegistryBuilder("acme", _spec_model(resources=[make_resource("/v1/widgets")]))
        _, instances, _ = builder.build_resources()

        instance = instances["acme_widgets_v1_instance"]
        assert instance.instance_of == "acme_widgets_v1"
        assert instance.read.operation == Operation.read
        assert instance.read.method == "GET"
        assert instance.resource_schema["id"].required is True
        assert instance.resource_schema["id"].computed is False
        for name in ("label", "size", "tags"):
            assert instance.resource_schema[name].required is False
            assert instance.resource_schema[name].computed is True
        assert instance.resource_schema["tags"].kind == PropertyKind.array

    def test_instance_nested_properties_are_computed(self, make_resource):
        settings = SchemaProperty(
            name="settings",
            kind=PropertyKind.object,
            required=True,
            properties=[
                SchemaProperty(name="mode", required=True),
                SchemaProperty(
                    name="limits",
                    kind=PropertyKind.object,
                    properties=[SchemaProperty(name="max", kind=PropertyKind.integer, required=True)],
                ),
            ],
        )
        descriptor = make_resource("/v1/widgets", resource_schema=ResourceSchema(properties=[settings]))

        resources, instances, _ = RegistryBuilder("acme", _spec_model(resources=[descriptor])).build_resources()

        assert resources["acme_widgets_v1"].resource_schema["settings"].properties[0].required is True
        projected = instances["acme_widgets_v1_instance"].resource_schema["settings"]
        mode, limits = projected.properties
        assert (mode.required, mode.computed) == (False, True)
        assert (limits.required, limits.computed) == (False, True)
        assert (limits.properties[0].required, limits.properties[0].computed) == (False, True)

    def test_sub_resource_carries_parent_identifiers(self, make_resource):
        spec_model = _spec_model(
            resources=[make_resource("/v1/cdns"), make_resource("/v1/cdns/{cdn_id}/firewalls")],
        )

        resources, instances, _ = RegistryBuilder("openapi", spec_model).build_resources()

        assert set(resources) == {"openapi_cdns_v1", "openapi_cdns_v1_firewalls"}
        parent_id = resources["openapi_cdns_v1_firewalls"].resource_schema["openapi_cdns_v1_id"]
        assert parent_id.required is True
        instance_parent_id = instances["openapi_cdns_v1_firewalls_instance"].resource_schema["openapi_cdns_v1_id"]
        assert instance_parent_id.required is True
        assert instance_parent_id.computed is False

    def test_ignored_resource_is_not_registered(self, make_resource):
        builder = RegistryBuilder("provider", _spec_model(resources=[make_resource("/v1/resource", ignore=True)]))

        resources, instances, _ = builder.build_resources()

        assert resources == {}
        assert instances == {}

    def test_colliding_resources_drop_their_instances_too(self, make_resource):
        spec_model = _spec_model(
            resources=[
                make_resource("/v1/abc", preferred_name="thing"),
                make_resource("/v1/xyz", preferred_name="thing"),
            ]
        )

        resources, instances, collisions = RegistryBuilder("acme", spec_model).build_resources()

        assert resources == {}
        assert instances == {}
        assert "thing" in collisions[0].qualified_name

    def test_resource_factory_errors_propagate(self, make_resource):
        descriptor = make_resource("/hello", operations=frozenset({Operation.create}))

        with pytest.raises(FactoryError, match="hello"):
            RegistryBuilder("provider", _spec_model(resources=[descriptor])).build_resources()

    def test_array_without_item_kind_is_rejected(self, make_resource):
        descriptor = make_resource(
            "/hello",
            resource_schema=ResourceSchema(properties=[SchemaProperty(name="tags", kind=PropertyKind.array)]),
        )

        with pytest.raises(FactoryError, match="tags"):
            RegistryBuilder("provider", _spec_model(resources=[descriptor])).build_resources()

    def test_empty_resource_name_fails(self, make_resource):
        with pytest.raises(ProviderConfigError, match="resource name can not be empty"):
            RegistryBuilder("provider", _spec_model(resources=[make_resource("", name="")])).build_resources()

    def test_spec_model_errors_propagate(self):
        with patch.object(InMemorySpecModel, "get_resources", side_effect=RuntimeError("error getting resources")):
            with pytest.raises(RuntimeError, match="error getting resources"):
                RegistryBuilder("provider", _spec_model()).build_resources()


class TestDataSources:
    def test_data_source_is_registered(self, make_data_source):
        builder = RegistryBuilder("provider", _spec_model(data_sources=[make_data_source("/v1/resource")]))
        data_sources, _ = builder.build_data_sources()

        data_source = data_sources["provider_resource_v1"]
        assert data_source.read.operation == Operation.list
        assert data_source.read.path == "/v1/resource"
        assert data_source.resource_schema["label"].computed is True
        assert data_source.resource_schema["label"].required is False
        assert data_source.instance_of is None

    def test_data_source_has_a_filter_block(self, make_data_source):
        builder = RegistryBuilder("provider", _spec_model(data_sources=[make_data_source("/v1/resource")]))
        data_sources, _ = builder.build_data_sources()

        filter_block = data_sources["provider_resource_v1"].resource_schema[FILTER_PROPERTY]
        assert filter_block.kind == PropertyKind.array
        assert filter_block.optional is True
        assert [prop.name for prop in filter_block.properties] == ["name", "values"]

    def test_data_source_nested_properties_are_computed(self, make_data_source):
        descriptor = make_data_source("/v1/resource").model_copy(
            update={
                "resource_schema": ResourceSchema(
                    properties=[
                        SchemaProperty(
                            name="owner",
                            kind=PropertyKind.object,
                            properties=[SchemaProperty(name="email", required=True)],
                        )
                    ]
                )
            }
        )

        data_sources, _ = RegistryBuilder("provider", _spec_model(data_sources=[descriptor])).build_data_sources()

        email = data_sources["provider_resource_v1"].resource_schema["owner"].properties[0]
        assert email.required is False
        assert email.computed is True

    def test_sub_resource_data_source_requires_parent_identifier(self, make_data_source):
        spec_model = _spec_model(data_sources=[make_data_source("/v1/cdns/{id}/firewalls")])

        data_sources, _ = RegistryBuilder("openapi", spec_model).build_data_sources()

        assert list(data_sources) == ["openapi_cdns_v1_firewalls"]
        parent_id = data_sources["openapi_cdns_v1_firewalls"].resource_schema["openapi_cdns_v1_id"]
        assert parent_id.kind == PropertyKind.string
        assert parent_id.required is True
        assert parent_id.computed is False

    def test_data_source_factory_errors_propagate(self, make_data_source):
        builder = RegistryBuilder(
            "provider",
            _spec_model(data_sources=[make_data_source("/hello")]),
            data_source_factory=FailingDataSourceFactory(),
        )

        with pytest.raises(FactoryError, match="createTerraformDataSource failed"):
            builder.build_data_sources()

    def test_data_source_without_read_operation_is_rejected(self, make_resource):
        descriptor = make_resource("/hello", operations=frozenset({Operation.create}))

        with pytest.raises(FactoryError, match="list or read"):
            DefaultDataSourceFactory("provider").create_data_source("provider_hello", descriptor)


class TestMergedRegistries:
    def test_instances_and_standalone_data_sources_share_one_registry(self, make_resource, make_data_source):
        spec_model = _spec_model(
            resources=[make_resource("/v1/widgets")],
            data_sources=[make_data_source("/v1/gadgets")],
        )

        registries = RegistryBuilder("acme", spec_model).build()

        assert set(registries.data_sources) == {"acme_widgets_v1_instance", "acme_gadgets_v1"}
        assert all(isinstance(ds, DataSourceDefinition) for ds in registries.data_sources.values())

    def test_name_clash_between_categories_is_last_write_wins(self, make_resource, make_data_source):
        spec_model = _spec_model(
            resources=[make_resource("/widgets")],
            data_sources=[make_data_source("/lookup", preferred_name="widgets_instance")],
        )

        registries = RegistryBuilder("acme", spec_model).build()

        data_source = registries.data_sources["acme_widgets_instance"]
        assert data_source.instance_of is None
        assert data_source.path == "/lookup"
        assert list(registries.resources) == ["acme_widgets"]

    def test_collisions_from_both_categories_are_reported(self, make_resource, make_data_source):
        spec_model = _spec_model(
            resources=[make_resource("/a", preferred_name="thing"), make_resource("/b", preferred_name="thing")],
            data_sources=[make_data_source("/c", preferred_name="look"), make_data_source("/d", preferred_name="look")],
        )

        registries = RegistryBuilder("acme", spec_model).build()

        assert [report.qualified_name for report in registries.collisions] == ["acme_thing", "acme_look"]
        assert registries.resources == {}
        assert registries.data_sources == {}
