"""Shared constants, types and errors for pfs.

All modules import from here to avoid circular dependencies.
"""

from dataclasses import dataclass

# --- Wire Constants ---

GENERATE_PATH = "/api/generate"
HEALTH_PATH = "/"
TEMPERATURE = 0

DEFAULT_TIMEOUT = 120.0  # seconds for one generate call (local models are slow)
HEARTBEAT_TIMEOUT = 2.0  # seconds for the liveness check

# Shell wrapper picks this up and evals it
CORRECTED_CMD_FILE = "/tmp/pfs_cmd"

HTML_PREFIX = "<!doctype html"

TERMINAL_FAILURE_REASON = "the language model did not return a valid correction after two attempts"


# --- Types ---

@dataclass(frozen=True)
class CorrectionRequest:
    """The failed command as captured by the shell hook."""
    command: str
    output: str
    exit_code: int

    @classmethod
    def from_dict(cls, data: dict) -> "CorrectionRequest":
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        command = data.get("command")
        if not isinstance(command, str) or not command.strip():
            raise ValueError("'command' must be a non-empty string")
        output = data.get("output")
        if output is None:
            output = ""
        if not isinstance(output, str):
            raise ValueError("'output' must be a string")
        exit_code = data.get("exit_code")
        # bool is an int subclass; reject it
        if not isinstance(exit_code, int) or isinstance(exit_code, bool):
            raise ValueError("'exit_code' must be an integer")
        return cls(command=command, output=output, exit_code=exit_code)


@dataclass(frozen=True)
class Correction:
    explanation: str
    corrected_command: str


@dataclass(frozen=True)
class GenerateResult:
    """One non-streaming /api/generate response."""
    text: str
    eval_count: int = 0
    eval_duration: int = 0  # nanoseconds
    done: bool = False

    @property
    def duration(self) -> float:
        return self.eval_duration / 1e9


# --- Errors ---

class PFSError(RuntimeError):
    pass


class ConfigurationError(PFSError):
    """Required configuration is absent or invalid."""


class ProviderConnectionError(ConnectionError):
    """The inference server URL is unusable or failed the liveness check."""


class AttemptError(PFSError):
    """One attempt failed. Only ever drives the retry decision."""


class ProviderError(AttemptError):
    """Transport-level failure during a generate call."""


class ProxyInterferenceError(ProviderError):
    """Got an HTML page instead of a model response (proxy or captive portal)."""


class EmptyResponseError(AttemptError):
    pass


class NoJSONFoundError(AttemptError):
    pass


class MalformedJSONError(AttemptError):
    pass


class TerminalFailure(PFSError):
    """Both attempts are exhausted.

    `errors` holds one entry per attempt: the AttemptError it raised, or None
    when the attempt decoded a correction with an empty command.
    """

    def __init__(self, reason: str = TERMINAL_FAILURE_REASON, errors: list | None = None):
        super().__init__(reason)
        self.reason = reason
        self.errors = list(errors or [])

    @property
    def proxy_interference(self) -> bool:
        return any(isinstance(e, ProxyInterferenceError) for e in self.errors)
