# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# See the License at http://www.apache.org/licenses/LICENSE-2.0
# Distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND.

"""
Configuration is read once, at startup, into an immutable Configuration.

Values are looked up in the environment first and then in an optional
`vecsum.yaml` file in the working directory, e.g.

~~~
VECSUM_PATH: /benchmarks/doubles.bin
VECSUM_PASSES: 3
VECSUM_TYPE: zerocopy
~~~
"""

import logging
import typing
from dataclasses import dataclass
from os import environ
from pathlib import Path

from vecsum.constants import DEFAULT_RPC_ADDRESS
from vecsum.constants import BackendType
from vecsum.constants import ReducerType
from vecsum.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "vecsum.yaml"


def strip_comment(line: str) -> str:
    """
    Remove a trailing comment, a `#` only starts a comment outside quotes and
    at the start of the line or after whitespace.
    """
    quote = None
    for index, char in enumerate(line):
        if quote:
            if char == quote:
                quote = None
        elif char in "'\"" and (index == 0 or line[index - 1] in " \t:"):
            quote = char
        elif char == "#" and (index == 0 or line[index - 1].isspace()):
            return line[:index]
    return line


def parse_yaml(yaml_str: str) -> dict:
    """
    Parse the flat `key: value` subset of YAML the config file uses.

    Comments and blank lines are ignored, integers are converted, everything
    else is kept as a string.
    """

    def line_value(value):
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            return value[1:-1]
        if value.isdigit():
            return int(value)
        if value.lower() in ("none", "null", "~", ""):
            return None
        return value

    result: dict = {}
    for line in yaml_str.strip().split("\n"):
        line = strip_comment(line).strip()
        if not line:
            continue
        if ":" not in line:
            raise ValueError(f"Unable to parse configuration line `{line}`")
        key, value = line.split(":", 1)
        result[key.strip()] = line_value(value)
    return result


def read_config_file(path: typing.Union[str, Path, None] = None) -> dict:
    """
    Read the configuration file, a missing file is the same as an empty one.
    """
    config_path = Path(path) if path is not None else Path(".") / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with open(config_path, "r", encoding="UTF8") as config_file:
        values = parse_yaml(config_file.read())
    logger.debug("Loaded configuration from `%s`", config_path)
    return values


def get(key: str, default=None, *, environment=None, file_values=None):
    environment = environ if environment is None else environment
    value = environment.get(key)
    if value is None and file_values:
        value = file_values.get(key)
    if value is None:
        return default
    return value


def parse_backend_type(value: str) -> typing.Optional[BackendType]:
    try:
        return BackendType(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class Configuration:
    """
    Everything a run needs to know, resolved before any I/O takes place.

    Parameters:
        path: str
            The file to read.
        passes: int
            The number of times to read the file, greater than zero.
        backend: BackendType
            Which of the read strategies to benchmark.
        rpc_address: str
            The storage endpoint for the remote backends.
        reducer: ReducerType
            Which summation routine to apply to the chunks.
        debug: bool
            Log at DEBUG level.
    """

    path: str
    passes: int
    backend: BackendType
    rpc_address: str = DEFAULT_RPC_ADDRESS
    reducer: ReducerType = ReducerType.WIDE
    debug: bool = False

    @classmethod
    def load(
        cls,
        environment: typing.Optional[typing.Mapping[str, str]] = None,
        config_file: typing.Union[str, Path, None] = None,
    ) -> "Configuration":
        """
        Build the Configuration from the environment and the config file.

        Raises:
            ConfigError: a required value is missing or a value is invalid.
        """
        file_values = read_config_file(config_file)

        def lookup(key, default=None):
            return get(key, default, environment=environment, file_values=file_values)

        path = lookup("VECSUM_PATH")
        if not path:
            raise ConfigError(
                config_item="VECSUM_PATH",
                valid_value_description="the path of the file to read",
            )

        passes_value = lookup("VECSUM_PASSES")
        if passes_value is None:
            raise ConfigError(
                config_item="VECSUM_PASSES",
                valid_value_description="the number of passes to make",
            )
        try:
            passes = int(passes_value)
        except (TypeError, ValueError):
            passes = 0
        if passes <= 0:
            raise ConfigError(
                config_item="VECSUM_PASSES",
                provided_value=str(passes_value),
                valid_value_description="a number greater than 0",
            )

        type_value = lookup("VECSUM_TYPE")
        if type_value is None:
            raise ConfigError(
                config_item="VECSUM_TYPE",
                valid_value_description=BackendType.valid_values(),
            )
        backend = parse_backend_type(type_value)
        if backend is None:
            raise ConfigError(
                config_item="VECSUM_TYPE",
                provided_value=str(type_value),
                valid_value_description=BackendType.valid_values(),
            )

        reducer_value = lookup("VECSUM_REDUCER", ReducerType.WIDE.value)
        try:
            reducer = ReducerType(str(reducer_value).strip().lower())
        except ValueError as err:
            raise ConfigError(
                config_item="VECSUM_REDUCER",
                provided_value=str(reducer_value),
                valid_value_description="wide or simple",
            ) from err

        rpc_address = lookup("VECSUM_RPC_ADDRESS") or DEFAULT_RPC_ADDRESS
        debug = str(lookup("VECSUM_DEBUG", "")).lower() not in ("", "0", "false", "no")

        return cls(
            path=str(path),
            passes=passes,
            backend=backend,
            rpc_address=str(rpc_address),
            reducer=reducer,
            debug=debug,
        )
