# Custom exceptions for Gelato

class GelatoError(Exception):
    """Base exception for all application-specific errors."""
    pass

class ParserError(GelatoError):
    """Raised when a Go source file cannot be parsed by tree-sitter."""
    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        self.message = message
        super().__init__(f"Failed to parse {file_path}: {message}")

class GoModuleError(GelatoError):
    """Raised when a go.mod file does not declare a module."""
    def __init__(self, go_mod_path: str):
        self.go_mod_path = go_mod_path
        super().__init__(f"invalid go.mod file: no module name found in {go_mod_path}")

class EmissionError(GelatoError):
    """Raised when a generated file cannot be formatted or its imports resolved."""
    def __init__(self, file_path: str, message: str, debug_path: str = None):
        self.file_path = file_path
        self.message = message
        self.debug_path = debug_path
        text = f"Failed to emit {file_path}: {message}"
        if debug_path:
            text += f" (unformatted output written to {debug_path})"
        super().__init__(text)

class SynthesisError(GelatoError):
    """
    Raised when the synthesizer meets a type shape or identifier it has no rule for.

    This is a programming error in gelato itself, never a problem with user input.
    The compiler lets it propagate; the CLI reports it as a failed command.
    """
    pass

class ConfigError(GelatoError):
    """Raised for configuration-related problems."""
    pass
