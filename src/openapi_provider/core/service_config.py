# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the terms described in the LICENSE file in
# the root directory of this source tree.

import json
import os
import re
import subprocess
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from openapi_provider.core.errors import EnvVarError, PropertyCommandError
from openapi_provider.log import get_logger

logger = get_logger(name=__name__, category="core::config")

SWAGGER_URL_ENV_VAR = "OTF_VAR_{provider_name}_SWAGGER_URL"
INSECURE_SKIP_VERIFY_ENV_VAR = "OTF_INSECURE_SKIP_VERIFY"

DEFAULT_COMMAND_TIMEOUT_SECONDS = 10


class ContentType(StrEnum):
    json = "json"
    raw = "raw"


class ExternalConfiguration(BaseModel):
    file: str = Field(..., description="File holding the property value, typically written by `cmd`")
    key_name: str | None = Field(
        default=None, description="Dotted path to the value inside a JSON file, for instance $.credentials.token"
    )
    content_type: ContentType = ContentType.raw

    def read(self) -> str:
        content = Path(self.file).expanduser().read_text()
        if self.content_type == ContentType.raw:
            return content.strip()

        value: Any = json.loads(content)
        key_path = (self.key_name or "").removeprefix("$").strip(".")
        for key in filter(None, key_path.split(".")):
            if not isinstance(value, dict) or key not in value:
                raise KeyError(f"key '{self.key_name}' not found in {self.file}")
            value = value[key]
        return value if isinstance(value, str) else json.dumps(value)


class SchemaPropertyConfiguration(BaseModel):
    """How to obtain the default value of one provider configuration property."""

    schema_property_name: str
    default_value: str | None = None
    cmd: list[str] | None = Field(default=None, description="Command executed before the default value is read")
    cmd_timeout: int = DEFAULT_COMMAND_TIMEOUT_SECONDS
    external_configuration: ExternalConfiguration | None = None

    def execute_command(self) -> None:
        if not self.cmd:
            return
        logger.debug(f"executing command {self.cmd} for property '{self.schema_property_name}'")
        try:
            completed = subprocess.run(self.cmd, capture_output=True, text=True, timeout=self.cmd_timeout)
        except subprocess.TimeoutExpired as e:
            raise PropertyCommandError(
                self.schema_property_name, self.cmd, f"timed out after {self.cmd_timeout}s"
            ) from e
        except OSError as e:
            raise PropertyCommandError(self.schema_property_name, self.cmd, str(e)) from e
        if completed.returncode != 0:
            raise PropertyCommandError(
                self.schema_property_name,
                self.cmd,
                f"exit status {completed.returncode}: {completed.stderr.strip()}",
            )

    def get_default_value(self) -> str | None:
        if self.external_configuration is not None:
            return self.external_configuration.read()
        return self.default_value

    def resolve(self) -> str | None:
        self.execute_command()
        return self.get_default_value()


class ServiceConfiguration(BaseModel):
    swagger_url: str | None = None
    insecure_skip_verify: bool = False
    schema_configuration: list[SchemaPropertyConfiguration] = Field(default_factory=list)

    def get_schema_property_configuration(self, schema_property_name: str) -> SchemaPropertyConfiguration | None:
        for property_configuration in self.schema_configuration:
            if property_configuration.schema_property_name == schema_property_name:
                return property_configuration
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServiceConfiguration":
        return cls(**replace_env_vars(data))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ServiceConfiguration":
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f) or {})


def load_service_configuration(provider_name: str, path: str | Path | None = None) -> ServiceConfiguration:
    """Load a provider's service configuration, letting the environment override the document."""
    config = ServiceConfiguration.from_yaml(path) if path else ServiceConfiguration()

    swagger_url = os.environ.get(SWAGGER_URL_ENV_VAR.format(provider_name=provider_name))
    if swagger_url:
        config.swagger_url = swagger_url
    skip_verify = os.environ.get(INSECURE_SKIP_VERIFY_ENV_VAR)
    if skip_verify:
        config.insecure_skip_verify = skip_verify.lower() == "true"
    return config


def replace_env_vars(config: Any, path: str = "") -> Any:
    if isinstance(config, dict):
        result = {}
        for k, v in config.items():
            try:
                result[k] = replace_env_vars(v, f"{path}.{k}" if path else k)
            except EnvVarError as e:
                raise EnvVarError(e.var_name, e.path) from None
        return result

    elif isinstance(config, list):
        result = []
        for i, v in enumerate(config):
            try:
                result.append(replace_env_vars(v, f"{path}[{i}]"))
            except EnvVarError as e:
                raise EnvVarError(e.var_name, e.path) from None
        return result

    elif isinstance(config, str):
        # Pattern supports bash-like syntax: := for default and :+ for conditional and a optional value
        pattern = r"\${env\.([A-Z0-9_]+)(?::([=+])([^}]*))?}"

        def get_env_var(match: re.Match):
            env_var = match.group(1)
            operator = match.group(2)  # '=' for default, '+' for conditional
            value_expr = match.group(3)

            env_value = os.environ.get(env_var)

            if operator == "=":
                value = env_value or value_expr
            elif operator == "+":
                value = value_expr if env_value else ""
            else:
                if not env_value:
                    raise EnvVarError(env_var, path)
                value = env_value

            return os.path.expanduser(value)

        try:
            result = re.sub(pattern, get_env_var, config)
        except EnvVarError as e:
            raise EnvVarError(e.var_name, e.path) from None
        # ${env.FOO:=} and ${env.FOO:+...} may leave nothing behind
        if result != config and result == "":
            return None
        return result

    return config
