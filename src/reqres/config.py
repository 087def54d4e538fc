'''Loads the client configuration from command line overrides, environment
variables and a Java-style properties file, in that order of precedence.

Example ``config.properties``::

    api.base.url=https://reqres.in/api/users
    debug=true
'''
from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Mapping

from attrs import field, frozen, validators

from dotenv import dotenv_values, find_dotenv, load_dotenv

import httpx

from loguru import logger

from pyrsistent import pmap

class ConfigError(Exception):
    pass

default_properties_file = Path('config.properties')

env_varnames = pmap({
    'base_url':  'REQRES_BASE_URL',
    'debug':     'REQRES_DEBUG',
    'max_pages': 'REQRES_MAX_PAGES',
    'timeout':   'REQRES_TIMEOUT',
})

properties_keys = pmap({
    'base_url':  'api.base.url',
    'debug':     'debug',
    'max_pages': 'max.pages',
    'timeout':   'timeout',
})

def parse_bool(value: str | bool | None) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return value.strip().lower() in ('true', '1', 'yes', 'on')

def parse_max_pages(value: str | int | None) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        max_pages = int(value)
    except ValueError:
        raise ConfigError(f'max pages must be a positive integer, got: {value!r}')
    if max_pages < 1:
        raise ConfigError(f'max pages must be a positive integer, got: {value!r}')
    return max_pages

def parse_timeout(value: str | float | None) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigError(f'timeout must be a positive number of seconds, got: {value!r}')
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f'timeout must be a positive number of seconds, got: {value!r}')
    return timeout

def validate_base_url(instance, attribute, value: str) -> None:
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise ConfigError(f'Invalid base URL {value!r}: {e}')
    if url.scheme not in ('http', 'https') or not url.host:
        raise ConfigError(f'Invalid base URL {value!r}: must be an absolute http or https URL')

@frozen(kw_only=True)
class Config:
    '''Settings for one pagination run. Instances are immutable.'''

    base_url: str = field(
        validator=[validators.instance_of(str), validate_base_url]
    )
    '''URL of the user-listing endpoint. Required.'''

    debug: bool = field(default=False, converter=parse_bool)
    '''Print every field of every user. Default: ``False``.'''

    max_pages: int | None = field(default=None, converter=parse_max_pages)
    '''Maximum number of pages to fetch. Default: ``None``, i.e. no limit.'''

    timeout: float | None = field(default=None, converter=parse_timeout)
    '''Request timeout in seconds. Default: ``None``, i.e. the client default timeouts.'''

    def httpx_timeout(self, default: httpx.Timeout) -> httpx.Timeout:
        return default if self.timeout is None else httpx.Timeout(self.timeout)

def read_properties(path: Path) -> dict[str, str | None]:
    '''Reads ``key=value`` lines. Lines starting with ``#`` are comments.'''
    if not path.is_file():
        raise ConfigError(f'Unable to find properties file {path}')
    return dotenv_values(path)

def load_config(
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
    load_env_file: bool = True,
    **overrides,
) -> Config:
    '''Builds a Config. Values in ``overrides`` that are not ``None`` win over
    environment variables, which win over the properties file. When
    ``config_file`` is ``None``, ``config.properties`` in the working directory
    is read if it exists.

    Raises ConfigError if the base URL is missing or empty, or any value is invalid.
    '''
    unknown = set(overrides) - set(env_varnames)
    if unknown:
        raise TypeError(f'Unknown configuration settings: {sorted(unknown)}')

    if load_env_file:
        load_dotenv(find_dotenv(usecwd=True))
    if environ is None:
        environ = os.environ

    if config_file is not None:
        properties = read_properties(Path(config_file))
    elif default_properties_file.is_file():
        properties = read_properties(default_properties_file)
    else:
        properties = {}

    settings = {}
    for name in env_varnames:
        if overrides.get(name) is not None:
            settings[name] = overrides[name]
        elif environ.get(env_varnames[name]) is not None:
            settings[name] = environ[env_varnames[name]]
        elif properties.get(properties_keys[name]) is not None:
            settings[name] = properties[properties_keys[name]]

    base_url = settings.pop('base_url', None)
    if base_url is None or not base_url.strip():
        raise ConfigError(
            f"'{properties_keys['base_url']}' not found or is empty. Set it in {default_properties_file}, "
            f"set {env_varnames['base_url']}, or pass --base-url."
        )

    config = Config(base_url=base_url.strip(), **settings)
    logger.debug('Loaded configuration: {config}', config=config)
    return config
