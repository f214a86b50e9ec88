"""
Line-oriented rewriting of `wasm-tools print` output.

Only two declarations are touched, and only their first occurrence:

    (memory (;0;) N)                                       -> N = pages
    (global $__stack_pointer (;0;) (mut i32) i32.const N)  -> N = pages * PAGE_SIZE

Matching relies on the printer's canonical formatting, including the
``(;0;)`` index comments. Everything else in the text, including the line
terminators, is passed through untouched.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

import structlog

from .config import PAGE_SIZE

logger = structlog.get_logger()

MEMORY_PATTERN = re.compile(r"^(\s*\(memory \(;0;\) )(\d+)(\).*)$")
STACK_POINTER_PATTERN = re.compile(
    r"^(\s*\(global \$__stack_pointer \(;0;\) \(mut i32\) i32\.const )(\d+)(\).*)$"
)


@dataclass
class PatchResult:
    """Patched lines plus the indices that were rewritten (None if absent)."""
    lines: List[str]
    memory_line: Optional[int] = None
    stack_pointer_line: Optional[int] = None


def _substitute(line: str, pattern, value: int) -> Optional[str]:
    # `$` would match before a trailing "\n", so test the body and splice the
    # number back into the original line to keep the terminator intact.
    match = pattern.match(line.rstrip("\r\n"))
    if match is None:
        return None
    return line[:match.start(2)] + str(value) + line[match.end(2):]


def patch_lines(lines: Sequence[str], memory_pages: int) -> PatchResult:
    """
    Rewrite the memory size and stack pointer declarations.

    Args:
        lines: Module text split into lines (terminators may be kept)
        memory_pages: New initial page count

    Returns:
        PatchResult with a list of the same length as ``lines``
    """
    stack_pointer = memory_pages * PAGE_SIZE
    result = PatchResult(lines=list(lines))

    for index, line in enumerate(result.lines):
        if result.memory_line is None:
            patched = _substitute(line, MEMORY_PATTERN, memory_pages)
            if patched is not None:
                result.lines[index] = patched
                result.memory_line = index
                logger.debug("Patched memory declaration", line=index + 1, pages=memory_pages)
                continue
        if result.stack_pointer_line is None:
            patched = _substitute(line, STACK_POINTER_PATTERN, stack_pointer)
            if patched is not None:
                result.lines[index] = patched
                result.stack_pointer_line = index
                logger.debug("Patched stack pointer", line=index + 1, value=stack_pointer)
        if result.memory_line is not None and result.stack_pointer_line is not None:
            break

    if result.memory_line is None:
        logger.debug("No memory declaration found; leaving page count unchanged")
    if result.stack_pointer_line is None:
        logger.debug("No $__stack_pointer global found; leaving stack pointer unchanged")
    return result


def patch_module_text(text: str, memory_pages: int) -> str:
    """Patch a whole WAT document and return it as a single string."""
    # Lines end at "\n" only; form feeds and Unicode separators stay inside a line
    return "\n".join(patch_lines(text.split("\n"), memory_pages).lines)
