# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import re
from dataclasses import dataclass, field

from openapi_provider.core.datatypes import CollisionReport, ResourceDescriptor
from openapi_provider.core.errors import ProviderConfigError
from openapi_provider.core.utils.names import to_compliant_name
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::naming")

INSTANCE_SUFFIX = "_instance"
PARENT_ID_SUFFIX = "_id"

_VERSION_SEGMENT = re.compile(r"^v\d+$")
_PATH_PARAMETER = re.compile(r"^\{[^}]+\}$")


@dataclass
class _NamedSegment:
    name: str
    version: str | None = None
    is_parent: bool = False

    @property
    def derived(self) -> str:
        name = to_compliant_name(self.name)
        return f"{name}_{self.version}" if self.version else name


def _named_segments(path: str) -> list[_NamedSegment]:
    segments: list[_NamedSegment] = []
    pending_version = None
    for raw in path.split("/"):
        if not raw:
            continue
        if _PATH_PARAMETER.match(raw):
            if segments:
                segments[-1].is_parent = True
            continue
        if _VERSION_SEGMENT.match(raw):
            pending_version = raw
            continue
        segments.append(_NamedSegment(raw, pending_version))
        pending_version = None
    return segments


def parent_names(descriptor: ResourceDescriptor) -> list[str]:
    """Derived names of every parent of a sub-resource, outermost first.

    Each entry is the full derived name of that parent, so ``/v1/cdns/{id}/firewalls/{fid}/rules``
    yields ``["cdns_v1", "cdns_v1_firewalls"]``.
    """
    if descriptor.parent_names is not None:
        return list(descriptor.parent_names)
    segments = _named_segments(descriptor.path)
    names = []
    for segment in segments[:-1]:
        if not segment.is_parent:
            continue
        prefix = names[-1] if names else None
        names.append(f"{prefix}_{segment.derived}" if prefix else segment.derived)
    return names


def derive_name(descriptor: ResourceDescriptor) -> str:
    """Compute the derived (unqualified) name of a resource or data source.

    The explicit name hint wins over the last path segment; a version segment
    right before that segment is appended as a suffix and sub-resources are
    prefixed with their closest parent's derived name.
    """
    segments = _named_segments(descriptor.path)
    own = segments[-1] if segments else _NamedSegment(descriptor.name)
    if descriptor.preferred_name:
        own = _NamedSegment(descriptor.preferred_name, own.version)
    if not own.name:
        return ""
    parents = parent_names(descriptor)
    if parents:
        return f"{parents[-1]}_{own.derived}"
    return own.derived


def qualified_name(provider_name: str, derived_name: str) -> str:
    if not derived_name:
        raise ProviderConfigError("resource name can not be empty")
    return f"{provider_name}_{derived_name}"


def instance_name(resource_qualified_name: str) -> str:
    return f"{resource_qualified_name}{INSTANCE_SUFFIX}"


def parent_id_property_name(parent_qualified_name: str) -> str:
    return f"{parent_qualified_name}{PARENT_ID_SUFFIX}"


@dataclass
class NamingResult:
    entries: dict[str, ResourceDescriptor] = field(default_factory=dict)
    collisions: list[CollisionReport] = field(default_factory=list)
    ignored: list[str] = field(default_factory=list)


class NamingResolver:
    def __init__(self, provider_name: str):
        self.provider_name = provider_name

    def qualify(self, descriptor: ResourceDescriptor) -> str:
        return qualified_name(self.provider_name, derive_name(descriptor))

    def resolve(self, descriptors: list[ResourceDescriptor]) -> NamingResult:
        """Map every non-ignored descriptor to a unique qualified name.

        Descriptors sharing a qualified name over different paths are all
        dropped and reported; duplicates over the same path keep the first.
        """
        result = NamingResult()
        collided: dict[str, CollisionReport] = {}

        for descriptor in descriptors:
            if descriptor.ignore:
                logger.info(
                    f"'{descriptor.name}' is marked to be ignored and therefore skipping resource registration into the provider"
                )
                result.ignored.append(descriptor.name)
                continue

            name = self.qualify(descriptor)

            if name in collided:
                report = collided[name]
                if descriptor.path not in report.paths:
                    report.paths.append(descriptor.path)
                continue

            existing = result.entries.get(name)
            if existing is None:
                result.entries[name] = descriptor
                continue

            if existing.path == descriptor.path:
                logger.debug(f"'{name}' is declared more than once for path '{descriptor.path}', keeping one")
                continue

            message = f"'{name}' is a duplicate resource name and is being removed from the provider"
            logger.warning(message)
            del result.entries[name]
            report = CollisionReport(qualified_name=name, paths=[existing.path, descriptor.path], message=message)
            collided[name] = report
            result.collisions.append(report)

        return result
