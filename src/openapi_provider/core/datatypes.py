# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import re
from collections.abc import Callable, Mapping
from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from openapi_provider.core.errors import BackendConfigurationError, InvalidPropertyValueError
from openapi_provider.core.utils.names import to_compliant_name

REGION_PLACEHOLDER = "${region}"
IDENTIFIER_PROPERTY = "id"

_PATH_PARAMETER = re.compile(r"^\{(?P<name>[^}]+)\}$")


class PropertyKind(StrEnum):
    string = "string"
    integer = "integer"
    number = "number"
    boolean = "boolean"
    object = "object"
    array = "array"


class Operation(StrEnum):
    create = "create"
    read = "read"
    update = "update"
    delete = "delete"
    list = "list"


class DescriptorKind(StrEnum):
    """Closed set of descriptor variants, resolved when the API document is parsed."""

    resource = "resource"
    data_source = "data_source"
    sub_resource_data_source = "sub_resource_data_source"


class SchemaProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: PropertyKind = PropertyKind.string
    required: bool = False
    read_only: bool = False
    computed: bool = False
    sensitive: bool = False
    items: PropertyKind | None = Field(default=None, description="Element kind when kind is array")
    properties: list["SchemaProperty"] = Field(default_factory=list, description="Nested properties of objects")
    description: str | None = None

    @property
    def optional(self) -> bool:
        return not self.required and not self.computed

    @property
    def is_identifier(self) -> bool:
        return self.name == IDENTIFIER_PROPERTY


class ResourceSchema(BaseModel):
    """Ordered set of named properties describing a resource payload."""

    model_config = ConfigDict(frozen=True)

    properties: list[SchemaProperty] = Field(default_factory=list)

    def get_property(self, name: str) -> SchemaProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def names(self) -> list[str]:
        return [prop.name for prop in self.properties]


class ResourceDescriptor(BaseModel):
    """A resource or data source as declared by the API document.

    ``path`` is the collection path of the entity (``/v1/cdns``, or
    ``/v1/cdns/{cdn_id}/firewalls`` for a sub-resource).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    preferred_name: str | None = None
    ignore: bool = False
    kind: DescriptorKind = DescriptorKind.resource
    resource_schema: ResourceSchema = Field(default_factory=ResourceSchema)
    operations: frozenset[Operation] = frozenset()
    parent_names: list[str] | None = Field(
        default=None, description="Derived names of the parent resources, when already known upstream"
    )

    @property
    def path_segments(self) -> list[str]:
        return [segment for segment in self.path.split("/") if segment]

    @property
    def parent_path_parameters(self) -> list[str]:
        """Path parameters that identify a parent of this entity (ignores a trailing own-identifier)."""
        segments = self.path_segments
        while segments and _PATH_PARAMETER.match(segments[-1]):
            segments = segments[:-1]
        params = []
        for segment in segments:
            match = _PATH_PARAMETER.match(segment)
            if match:
                params.append(match.group("name"))
        return params

    @property
    def is_sub_resource(self) -> bool:
        return bool(self.parent_path_parameters)

    def supports(self, operation: Operation) -> bool:
        return operation in self.operations


class CollisionReport(BaseModel):
    qualified_name: str
    paths: list[str]
    message: str


class MultiRegionInfo(NamedTuple):
    is_multi_region: bool
    host: str
    regions: list[str]


class BackendConfiguration(BaseModel):
    host: str
    base_path: str = "/"
    schemes: list[str] = Field(default_factory=lambda: ["https"])
    regions: list[str] = Field(default_factory=list)

    def multi_region(self) -> MultiRegionInfo:
        if REGION_PLACEHOLDER not in self.host:
            return MultiRegionInfo(False, self.host, [])
        if not self.regions:
            raise BackendConfigurationError(
                f"host '{self.host}' is parametrized with {REGION_PLACEHOLDER} but no regions are declared"
            )
        return MultiRegionInfo(True, self.host, list(self.regions))

    def resolve_host(self, region: str | None = None) -> str:
        is_multi_region, host, regions = self.multi_region()
        if not is_multi_region:
            return host
        return host.replace(REGION_PLACEHOLDER, region or regions[0])

    @property
    def preferred_scheme(self) -> str:
        if "https" in self.schemes or not self.schemes:
            return "https"
        return self.schemes[0]


class SecurityLocation(StrEnum):
    header = "header"
    query = "query"


class SecurityDefinition(BaseModel):
    """API key security definition.

    :param name: name of the definition in the API document
    :param location: where the key travels on the wire
    :param parameter_name: header or query parameter carrying the key
    :param preferred_name: explicit configuration name, overrides the converted ``name``
    """

    model_config = ConfigDict(frozen=True)

    name: str
    location: SecurityLocation = SecurityLocation.header
    parameter_name: str = "Authorization"
    preferred_name: str | None = None

    @property
    def configuration_name(self) -> str:
        return self.preferred_name or to_compliant_name(self.name)


class SecuritySchemes(BaseModel):
    """Security requirement names applied globally to every operation."""

    names: list[str] = Field(default_factory=list)

    def contains(self, definition: SecurityDefinition) -> bool:
        return definition.name in self.names


class HeaderParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    preferred_name: str | None = None

    @property
    def configuration_name(self) -> str:
        return self.preferred_name or to_compliant_name(self.name)


class ConfigurationProperty(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: PropertyKind = PropertyKind.string
    required: bool = False
    default: str | None = None
    allowed_values: list[str] | None = None
    sensitive: bool = False
    description: str | None = None
    properties: dict[str, "ConfigurationProperty"] = Field(default_factory=dict)

    def validate_value(self, value: Any) -> None:
        if not self.allowed_values:
            return
        if value not in self.allowed_values:
            raise InvalidPropertyValueError(self.name, value, self.allowed_values)


class OperationBinding(BaseModel):
    """Declarative binding dispatched on by the external operation executor."""

    model_config = ConfigDict(frozen=True)

    operation: Operation
    method: str
    path: str


class ResourceDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    resource_schema: dict[str, SchemaProperty]
    operations: dict[Operation, OperationBinding]
    importable: bool = True

    def binding(self, operation: Operation) -> OperationBinding | None:
        return self.operations.get(operation)


class DataSourceDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    resource_schema: dict[str, SchemaProperty]
    read: OperationBinding
    instance_of: str | None = Field(default=None, description="Qualified name of the resource this projects")


class HeaderValue(BaseModel):
    name: str = Field(..., description="Header name as sent on the wire")
    value: str | None = None


class SecurityContext(BaseModel):
    scheme: str
    location: SecurityLocation
    parameter_name: str
    value: str | None = None


class ClientContext(BaseModel):
    headers: dict[str, HeaderValue] = Field(default_factory=dict)
    security: dict[str, SecurityContext] = Field(default_factory=dict)
    endpoints: dict[str, str] = Field(default_factory=dict)
    region: str | None = None

    def wire_headers(self) -> dict[str, str]:
        return {header.name: header.value for header in self.headers.values() if header.value}


class ProviderDefinition(BaseModel):
    """The assembled provider, shared read-only by every ``configure`` call."""

    model_config = ConfigDict(frozen=True)

    name: str
    configuration_schema: dict[str, ConfigurationProperty]
    resources: dict[str, ResourceDefinition]
    data_sources: dict[str, DataSourceDefinition]
    collisions: list[CollisionReport] = Field(default_factory=list)
    configure: Callable[[Mapping[str, Any]], Any]

    def validate_configuration(self, values: Mapping[str, Any]) -> list[str]:
        """Return user-facing errors for the supplied configuration values, empty when valid."""
        errors = []
        for name, prop in self.configuration_schema.items():
            value = values.get(name)
            if value is None or value == "":
                if prop.required and prop.default in (None, ""):
                    errors.append(f"property {name} is required")
                continue
            try:
                prop.validate_value(value)
            except InvalidPropertyValueError as e:
                errors.append(str(e))
        return errors
