"""Correction orchestrator: prompt, generate, extract, decode, retry once.

Two attempts, always sequential: the standard prompt, then the stricter retry
prompt. No loop and no backoff.
"""

import json

from console import status, C_RED, C_YELLOW, C_DIM, C_RESET
from extract import extract_json
from prompts import build_prompt, build_retry_prompt
from protocol import (
    Correction, AttemptError, EmptyResponseError, NoJSONFoundError, MalformedJSONError,
    ProxyInterferenceError, TerminalFailure,
)


def _field(data, key):
    value = data.get(key)
    if value is None:
        return ""
    if key == "corrected_command" and isinstance(value, list):
        if not all(isinstance(v, str) for v in value):
            raise MalformedJSONError(f"'{key}' list must contain only strings")
        return " && ".join(v.strip() for v in value if v.strip())
    if not isinstance(value, str):
        raise MalformedJSONError(f"'{key}' must be a string, got {type(value).__name__}")
    return value.strip()


def parse_correction(text):
    """Decode an extracted JSON span into a Correction.

    Missing keys decode as "". An empty corrected_command is a valid value here;
    the caller decides whether it is good enough.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJSONError(f"failed to decode JSON from model response: {e}") from e
    if not isinstance(data, dict):
        raise MalformedJSONError(f"expected a JSON object, got {type(data).__name__}")
    return Correction(
        explanation=_field(data, "explanation"),
        corrected_command=_field(data, "corrected_command"),
    )


def _attempt(provider, prompt, verbose, status_fn):
    result = provider.generate(prompt)
    if verbose:
        status_fn(f"{C_DIM}#{C_RESET}", f"Tokens Used: {result.eval_count}")
        status_fn(f"{C_DIM}#{C_RESET}", f"Total Time: {result.duration:.2f}s")
        status_fn(f"{C_DIM}#{C_RESET}", f"Raw Ollama Response: {result.text}")

    if not result.text.strip():
        raise EmptyResponseError("empty response from Ollama")

    span = extract_json(result.text)
    if not span:
        raise NoJSONFoundError("no valid JSON found in the response from Ollama")

    return parse_correction(span)


def _report_failure(label, err, status_fn):
    if err is None:
        status_fn(f"{C_YELLOW}~{C_RESET}", f"{label} attempt returned an empty corrected command")
    elif isinstance(err, ProxyInterferenceError):
        status_fn(f"{C_RED}!{C_RESET}", f"{label} attempt hit a proxy or captive portal: {err}")
    else:
        status_fn(f"{C_YELLOW}~{C_RESET}", f"{label} attempt failed with error: {err}")


def get_correction(provider, command, output, exit_code, verbose=False, status_fn=None):
    """Ask the model for a corrected command. Exactly one retry, never more.

    Returns a Correction with a non-empty corrected_command, or raises
    TerminalFailure. Per-attempt errors never escape.
    """
    status_fn = status_fn or status
    errors = []

    prompts = [
        ("First", build_prompt(command, output, exit_code)),
        ("Second", build_retry_prompt(command, output, exit_code)),
    ]
    for label, prompt in prompts:
        try:
            correction = _attempt(provider, prompt, verbose, status_fn)
        except AttemptError as e:
            err = e
        else:
            if correction.corrected_command:
                return correction
            err = None
        errors.append(err)
        if verbose:
            _report_failure(label, err, status_fn)

    raise TerminalFailure(errors=errors)
