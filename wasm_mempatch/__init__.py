"""
WebAssembly memory/stack patcher.

Rewrites the initial memory page count and the ``$__stack_pointer`` global of a
compiled module by round-tripping it through ``wasm-tools`` text form.
"""

from .config import Configuration, DEFAULT_MEMORY_PAGES, PAGE_SIZE, resolve_configuration
from .errors import PatcherError, DisassemblyError, AssemblyError, ConfigError
from .patcher import PatchResult, patch_lines, patch_module_text
from .toolchain import disassemble, assemble

__all__ = [
    # Configuration
    "Configuration",
    "DEFAULT_MEMORY_PAGES",
    "PAGE_SIZE",
    "resolve_configuration",
    # Errors
    "PatcherError",
    "DisassemblyError",
    "AssemblyError",
    "ConfigError",
    # Patching
    "PatchResult",
    "patch_lines",
    "patch_module_text",
    # Toolchain
    "disassemble",
    "assemble",
]
