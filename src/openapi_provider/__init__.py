# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

from openapi_provider.core.datatypes import (
    ClientContext as ClientContext,
)
from openapi_provider.core.datatypes import (
    ProviderDefinition as ProviderDefinition,
)
from openapi_provider.core.datatypes import (
    ResourceDescriptor as ResourceDescriptor,
)
from openapi_provider.core.provider import (
    ProviderFactory as ProviderFactory,
)
from openapi_provider.core.service_config import (
    ServiceConfiguration as ServiceConfiguration,
)
from openapi_provider.core.spec_model import (
    InMemorySpecModel as InMemorySpecModel,
)
