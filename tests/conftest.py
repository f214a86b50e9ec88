import stat
import sys
import textwrap

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Keep the caller's WASM_* overrides out of the tests."""
    monkeypatch.delenv("WASM_MEMPATCH_PAGES", raising=False)
    monkeypatch.delenv("WASM_TOOLS", raising=False)


# Stand-in for wasm-tools: "print" echoes the input file (which the tests fill
# with WAT text) and "parse -o OUT" copies stdin to OUT. Inputs whose name
# starts with "bad" are rejected the way the real tool rejects invalid modules.
FAKE_WASM_TOOLS = textwrap.dedent('''\
    #!{python}
    import os
    import sys

    cmd = sys.argv[1]
    if cmd == "print":
        path = sys.argv[2]
        if os.path.basename(path).startswith("bad"):
            sys.stderr.write("error: failed to parse " + path + "\\n")
            sys.exit(1)
        with open(path) as f:
            sys.stdout.write(f.read())
    elif cmd == "parse":
        text = sys.stdin.read()
        if "invalid" in text:
            sys.stderr.write("error: unexpected token\\n")
            sys.exit(1)
        with open(sys.argv[3], "w") as f:
            f.write(text)
    else:
        sys.exit(2)
''')


@pytest.fixture
def fake_wasm_tools(tmp_path):
    if sys.platform == "win32":
        pytest.skip("shebang scripts are not executable on Windows")
    script = tmp_path / "wasm-tools"
    script.write_text(FAKE_WASM_TOOLS.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


SAMPLE_WAT = (
    "(module\n"
    "  (type (;0;) (func))\n"
    "  (func $_start (;0;) (type 0))\n"
    "  (memory (;0;) 2)\n"
    "  (global $__stack_pointer (;0;) (mut i32) i32.const 65536)\n"
    "  (export \"memory\" (memory 0))\n"
    "  (export \"_start\" (func $_start))\n"
    ")\n"
)


@pytest.fixture(scope="session")
def sample_wat():
    return SAMPLE_WAT
