"""
Thin wrappers around the external `wasm-tools` binary.

``wasm-tools print`` turns a binary module into WAT text and ``wasm-tools
parse`` turns WAT text from stdin back into a binary. Both report failure via
a non-zero exit status and a message on stderr.
"""

import subprocess
from typing import List

import structlog

from .config import DEFAULT_WASM_TOOLS
from .errors import AssemblyError, DisassemblyError

logger = structlog.get_logger()


def _command(wasm_tools: str, *args: str) -> List[str]:
    return [wasm_tools, *args]


def disassemble(input_path: str, wasm_tools: str = DEFAULT_WASM_TOOLS) -> str:
    """
    Print a binary module as WAT text.

    Args:
        input_path: Path to the .wasm module
        wasm_tools: Executable to invoke

    Returns:
        The module text as produced by `wasm-tools print`

    Raises:
        DisassemblyError: If the tool exits non-zero or cannot be started
    """
    cmd = _command(wasm_tools, "print", input_path)
    logger.debug("Running disassembler", cmd=" ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        # Missing, non-executable, or a directory
        logger.error("Could not start disassembler", executable=wasm_tools, error=str(e))
        raise DisassemblyError(input_path, e.strerror or str(e))

    if result.returncode != 0:
        logger.debug("Disassembler failed", path=input_path, exit=result.returncode)
        raise DisassemblyError(input_path, result.stderr)

    logger.debug("Disassembled module", path=input_path, chars=len(result.stdout))
    return result.stdout


def assemble(wat_text: str, output_path: str, wasm_tools: str = DEFAULT_WASM_TOOLS) -> None:
    """
    Assemble WAT text into a binary module at ``output_path``.

    The text is streamed to the tool's stdin, which is closed before waiting
    on the process. The Popen context manager releases the pipes and reaps the
    child on every path out of this function.

    Raises:
        AssemblyError: If the tool exits non-zero or cannot be started
    """
    cmd = _command(wasm_tools, "parse", "-o", output_path)
    logger.debug("Running assembler", cmd=" ".join(cmd))
    try:
        with subprocess.Popen(
            cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        ) as proc:
            # communicate() writes the input, closes stdin and waits
            _, stderr = proc.communicate(input=wat_text)
    except OSError as e:
        logger.error("Could not start assembler", executable=wasm_tools, error=str(e))
        raise AssemblyError(output_path, e.strerror or str(e))

    if proc.returncode != 0:
        logger.debug("Assembler failed", path=output_path, exit=proc.returncode)
        raise AssemblyError(output_path, stderr or "")

    logger.debug("Wrote module", path=output_path)
