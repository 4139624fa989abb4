# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.


class ProviderConfigError(ValueError):
    """Raised when the engine is constructed with unusable inputs (name, spec model, service configuration)."""


class BackendConfigurationError(ValueError):
    """Raised when the backend declaration of the spec model is inconsistent."""


class FactoryError(ValueError):
    """Raised by a resource or data source factory that cannot synthesize a descriptor."""

    def __init__(self, descriptor_name: str, reason: str):
        self.descriptor_name = descriptor_name
        self.reason = reason
        super().__init__(f"failed to build '{descriptor_name}': {reason}")


class PropertyCommandError(RuntimeError):
    def __init__(self, property_name: str, command: list[str], detail: str):
        self.property_name = property_name
        self.command = command
        self.detail = detail
        super().__init__(f"command {command} for property '{property_name}' failed: {detail}")


class InvalidPropertyValueError(ValueError):
    def __init__(self, property_name: str, value: object, allowed_values: list[str]):
        self.property_name = property_name
        self.value = value
        self.allowed_values = allowed_values
        super().__init__(
            f"property {property_name} value {value} is not valid, please make sure the value is one of {allowed_values}"
        )


class MissingSecurityValueError(ValueError):
    def __init__(self, scheme_name: str):
        self.scheme_name = scheme_name
        super().__init__(f"security scheme '{scheme_name}' is required but no value was configured for it")


class EnvVarError(Exception):
    def __init__(self, var_name: str, path: str = ""):
        self.var_name = var_name
        self.path = path
        super().__init__(
            f"Environment variable '{var_name}' not set or empty {f'at {path}' if path else ''}. "
            f"Use ${{env.{var_name}:=default_value}} to provide a default value, "
            f"${{env.{var_name}:+value_if_set}} to make the field conditional, "
            f"or ensure the environment variable is set."
        )
