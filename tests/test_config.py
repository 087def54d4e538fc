import os

import attrs
import httpx
import pytest

from reqres.config import Config, ConfigError, load_config, parse_bool

reqres_url = 'https://reqres.in/api/users'

@pytest.fixture(autouse=True)
def empty_cwd(tmp_path, monkeypatch):
    '''Runs every test in an empty directory, so no config.properties is found by default.'''
    monkeypatch.chdir(tmp_path)
    return tmp_path

def write_properties(path, text):
    path.write_text(text)
    return path

def test_load_from_environment():
    config = load_config(environ={'REQRES_BASE_URL': reqres_url}, load_env_file=False)
    assert config == Config(base_url=reqres_url)
    assert config.debug is False
    assert config.max_pages is None
    assert config.timeout is None

def test_load_from_properties_file(tmp_path):
    properties = write_properties(tmp_path / 'client.properties', '\n'.join([
        '# ReqRes client configuration',
        f'api.base.url={reqres_url}',
        'debug=true',
        'max.pages=10',
        'timeout=2.5',
    ]))

    config = load_config(config_file=properties, environ={}, load_env_file=False)

    assert config.base_url == reqres_url
    assert config.debug is True
    assert config.max_pages == 10
    assert config.timeout == 2.5
    assert config.httpx_timeout(httpx.Timeout(10.0)) == httpx.Timeout(2.5)

def test_default_properties_file(empty_cwd):
    write_properties(empty_cwd / 'config.properties', f'api.base.url={reqres_url}\ndebug=false\n')

    config = load_config(environ={}, load_env_file=False)

    assert config.base_url == reqres_url
    assert config.debug is False

def test_env_file(empty_cwd, monkeypatch):
    # load_dotenv writes to os.environ, so give it a copy to write to:
    monkeypatch.setattr(os, 'environ', {
        name: value for name, value in os.environ.items() if name != 'REQRES_BASE_URL'
    })
    write_properties(empty_cwd / '.env', f'REQRES_BASE_URL={reqres_url}\n')

    config = load_config()

    assert config.base_url == reqres_url

def test_precedence(empty_cwd):
    write_properties(empty_cwd / 'config.properties', '\n'.join([
        'api.base.url=https://properties.test/api/users',
        'debug=true',
        'max.pages=3',
    ]))
    environ = {
        'REQRES_BASE_URL': 'https://environment.test/api/users',
        'REQRES_MAX_PAGES': '5',
    }

    config = load_config(environ=environ, load_env_file=False)
    assert config.base_url == 'https://environment.test/api/users'
    assert config.max_pages == 5
    assert config.debug is True

    config = load_config(
        environ=environ,
        load_env_file=False,
        base_url='https://override.test/api/users',
        max_pages=None,
    )
    assert config.base_url == 'https://override.test/api/users'
    assert config.max_pages == 5

@pytest.mark.parametrize('environ', [
    {},
    {'REQRES_BASE_URL': ''},
    {'REQRES_BASE_URL': '   '},
])
def test_missing_base_url(environ):
    with pytest.raises(ConfigError, match='not found or is empty'):
        load_config(environ=environ, load_env_file=False)

@pytest.mark.parametrize('base_url', [
    'reqres.in/api/users',
    'ftp://reqres.in/api/users',
    'https://',
])
def test_invalid_base_url(base_url):
    with pytest.raises(ConfigError, match='Invalid base URL'):
        load_config(environ={'REQRES_BASE_URL': base_url}, load_env_file=False)

@pytest.mark.parametrize('name, value', [
    ('REQRES_MAX_PAGES', '0'),
    ('REQRES_MAX_PAGES', 'many'),
    ('REQRES_TIMEOUT', '-1'),
    ('REQRES_TIMEOUT', 'soon'),
    ('REQRES_TIMEOUT', 'nan'),
    ('REQRES_TIMEOUT', 'inf'),
])
def test_invalid_values(name, value):
    with pytest.raises(ConfigError):
        load_config(environ={'REQRES_BASE_URL': reqres_url, name: value}, load_env_file=False)

def test_missing_properties_file(tmp_path):
    with pytest.raises(ConfigError, match='Unable to find'):
        load_config(config_file=tmp_path / 'missing.properties', environ={}, load_env_file=False)

def test_unknown_override():
    with pytest.raises(TypeError):
        load_config(environ={'REQRES_BASE_URL': reqres_url}, load_env_file=False, page_size=10)

@pytest.mark.parametrize('value, expected', [
    ('true', True),
    ('TRUE', True),
    (' yes ', True),
    ('1', True),
    ('on', True),
    (True, True),
    ('false', False),
    ('0', False),
    ('', False),
    ('nope', False),
    (None, False),
    (False, False),
])
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected

def test_config_is_immutable():
    config = Config(base_url=reqres_url)
    with pytest.raises(attrs.exceptions.FrozenInstanceError):
        config.debug = True
