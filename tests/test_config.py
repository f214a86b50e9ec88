import pytest

from wasm_mempatch.config import (
    DEFAULT_MEMORY_PAGES,
    DEFAULT_WASM_TOOLS,
    Configuration,
    load_config_file,
    resolve_configuration,
)
from wasm_mempatch.errors import ConfigError

pytestmark = pytest.mark.usefixtures("clean_env")


def test_defaults():
    config = resolve_configuration("in.wasm", "out.wasm", environ={})
    assert config == Configuration("in.wasm", "out.wasm", DEFAULT_MEMORY_PAGES, DEFAULT_WASM_TOOLS)
    assert config.stack_pointer == 8388608


@pytest.mark.parametrize("pages", [0, 1, 256, 65536])
def test_stack_pointer_is_top_of_memory(pages):
    assert Configuration("a", "b", memory_pages=pages).stack_pointer == pages * 65536


def test_config_file_values(tmp_path):
    path = tmp_path / "mempatch.yaml"
    path.write_text("pages: 512\nwasm_tools: /opt/wasm-tools\n")

    config = resolve_configuration("in.wasm", "out.wasm", config_path=str(path), environ={})

    assert config.memory_pages == 512
    assert config.wasm_tools == "/opt/wasm-tools"


def test_precedence_flags_over_env_over_file(tmp_path):
    path = tmp_path / "mempatch.yaml"
    path.write_text("pages: 512\nwasm_tools: from-file\n")
    environ = {"WASM_MEMPATCH_PAGES": "64", "WASM_TOOLS": "from-env"}

    from_env = resolve_configuration("i", "o", config_path=str(path), environ=environ)
    assert (from_env.memory_pages, from_env.wasm_tools) == (64, "from-env")

    from_flags = resolve_configuration(
        "i", "o", pages=32, wasm_tools="from-flag", config_path=str(path), environ=environ
    )
    assert (from_flags.memory_pages, from_flags.wasm_tools) == (32, "from-flag")


def test_explicit_zero_pages_beats_defaults():
    config = resolve_configuration("i", "o", pages=0, environ={"WASM_MEMPATCH_PAGES": "64"})
    assert config.memory_pages == 0


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("WASM_MEMPATCH_PAGES", "300")
    assert resolve_configuration("i", "o").memory_pages == 300


def test_empty_config_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config_file(str(path)) == {}


def test_unknown_keys_ignored(tmp_path):
    path = tmp_path / "extra.yaml"
    path.write_text("pages: 3\ncolour: blue\n")
    assert load_config_file(str(path)) == {"pages": 3}


@pytest.mark.parametrize("body", ["pages: lots\n", "pages: true\n", "- 1\n- 2\n", "pages: [1\n"])
def test_invalid_config_file(tmp_path, body):
    path = tmp_path / "bad.yaml"
    path.write_text(body)
    with pytest.raises(ConfigError):
        load_config_file(str(path))


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError) as excinfo:
        load_config_file(str(tmp_path / "nope.yaml"))
    assert "nope.yaml" in str(excinfo.value)


def test_invalid_env_pages():
    with pytest.raises(ConfigError) as excinfo:
        resolve_configuration("i", "o", environ={"WASM_MEMPATCH_PAGES": "many"})
    assert "WASM_MEMPATCH_PAGES" in str(excinfo.value)
