"""Exception taxonomy for the patch pipeline."""


class PatcherError(Exception):
    """Base class for failures that abort a patch run."""


class DisassemblyError(PatcherError):
    """The disassembler rejected the input module or could not be run."""

    def __init__(self, input_path: str, stderr: str):
        self.input_path = input_path
        self.stderr = stderr
        super().__init__(f"Error reading {input_path}: {stderr}")


class AssemblyError(PatcherError):
    """The assembler rejected the patched text or could not write the output."""

    def __init__(self, output_path: str, stderr: str):
        self.output_path = output_path
        self.stderr = stderr
        super().__init__(f"Error writing {output_path}: {stderr}")


class ConfigError(PatcherError):
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid configuration in {source}: {reason}")
