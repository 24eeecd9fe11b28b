#!/usr/bin/env python3
"""pfs -- ask a local Ollama model to fix your last failed command.

Usage:
    <shell hook> | pfs              Read the failed command as JSON on stdin
    pfs -v | --verbose              Also print tokens, timing and raw model output
    pfs -verbose                    Same as --verbose
    pfs -h | --help                 Show this help

Input (stdin):
    {"command": "lsa -l", "output": "lsa: command not found", "exit_code": 127}

Config:
    ~/.pfs.env                      OLLAMA_BASE_URL, OLLAMA_MODEL, PFS_TIMEOUT
    Environment variables of the same names override the file.

An accepted fix is written to /tmp/pfs_cmd for the shell wrapper to run.
"""

import json
import os
import shlex
import shutil
import sys

sys.path.insert(0, os.path.dirname(os.path.realpath(__file__)))

from config import load_config
from console import status, Spinner, C_RED, C_GREEN, C_YELLOW, C_DIM, C_BOLD_GREEN, C_RESET
from corrector import get_correction
from protocol import (
    CORRECTED_CMD_FILE, CorrectionRequest, ConfigurationError, ProviderConnectionError,
    TerminalFailure,
)
from provider import OllamaProvider

TTY_PATH = "/dev/tty"
SPINNER_MESSAGE = "Asking the llm for your last failed command..."


def read_request(stream):
    """Parse the shell hook's JSON document. Raises ValueError."""
    return CorrectionRequest.from_dict(json.loads(stream.read()))


def is_command_available(command):
    """True if the first word of command resolves on PATH."""
    try:
        parts = shlex.split(command)
    except ValueError:
        parts = command.split()
    if not parts:
        return False
    return shutil.which(parts[0]) is not None


def ask_confirm(stream):
    """Read one answer line. Only y/yes counts; EOF is a no."""
    line = stream.readline()
    return line.strip().lower() in ("y", "yes")


def write_corrected_command(command, path=CORRECTED_CMD_FILE):
    with open(path, "w") as f:
        f.write(command)


def _confirm_and_handoff(command):
    sys.stderr.write("> Execute this command? (y/n) ")
    sys.stderr.flush()
    try:
        with open(TTY_PATH) as tty:
            accepted = ask_confirm(tty)
    except OSError as e:
        status(f"{C_RED}✗{C_RESET}", f"Failed to open tty for user input: {e}")
        return 1

    if not accepted:
        print("Aborted.", file=sys.stderr)
        return 0

    try:
        write_corrected_command(command, CORRECTED_CMD_FILE)
    except OSError as e:
        status(f"{C_RED}✗{C_RESET}", f"Failed to write corrected command to temp file: {e}")
        return 1
    return 0


def run(request, cfg, verbose=False):
    try:
        provider = OllamaProvider.from_config(cfg)
    except (ConfigurationError, ProviderConnectionError) as e:
        status(f"{C_RED}✗{C_RESET}", f"Error: {e}")
        return 1
    status(f"{C_GREEN}✔{C_RESET}", f"Connected to Ollama model: {provider.model_name}")
    if verbose and cfg.get("_env_file"):
        status(f"{C_DIM}#{C_RESET}", f"Config file: {cfg['_env_file']}")

    with provider:
        try:
            # Verbose diagnostics would fight the spinner for the line
            with Spinner(SPINNER_MESSAGE, enabled=False if verbose else None):
                correction = get_correction(
                    provider, request.command, request.output, request.exit_code, verbose=verbose,
                )
        except TerminalFailure as e:
            status(f"{C_RED}✗{C_RESET}", f"Failed to get correction from LLM: {e}")
            if e.proxy_interference:
                status(f"{C_DIM}?{C_RESET}", "Got an HTML page from the server. Check for captive portals or proxies.")
            return 1

    fixed = correction.corrected_command
    if not is_command_available(fixed):
        if verbose:
            status(f"{C_DIM}#{C_RESET}", f"Corrected command is not valid or not in PATH: {fixed}")
        status(f"{C_YELLOW}!{C_RESET}",
               "The LLM returned a command that is not valid or not in your PATH. No action will be taken.")
        return 1

    print(file=sys.stderr)
    status("\U0001f9e0", f"Explanation: {correction.explanation}")
    status("\U0001f527", f"Corrected: {C_BOLD_GREEN}{fixed}{C_RESET}")
    print(file=sys.stderr)

    return _confirm_and_handoff(fixed)


# --- CLI ---

def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    verbose = False
    for a in args:
        if a in ("-h", "--help"):
            print(__doc__.strip())
            return 0
        elif a in ("-v", "-verbose", "--verbose"):
            verbose = True
        else:
            status(f"{C_RED}!{C_RESET}", f"Unknown option: {a}")
            print(__doc__.strip(), file=sys.stderr)
            return 2

    if sys.stdin.isatty():
        print(__doc__.strip())
        return 0

    try:
        request = read_request(sys.stdin)
    except ValueError as e:
        status(f"{C_RED}✗{C_RESET}", f"Failed to parse command info from stdin: {e}")
        return 1

    try:
        cfg = load_config()
    except ConfigurationError as e:
        status(f"{C_RED}✗{C_RESET}", f"Error: {e}")
        return 1

    try:
        return run(request, cfg, verbose=verbose)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
