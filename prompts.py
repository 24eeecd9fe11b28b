"""Prompt templates for the inference server.

Inputs are embedded verbatim. Nothing here is ever run by a shell.
"""


def build_prompt(command, output, exit_code):
    """Standard prompt: inputs, the exit-127 hint, the JSON-only mandate and one example."""
    return f"""You are a command-line expert. A user's command failed.
- Command: {command}
- Exit Code: {exit_code}
- Command Output: {output}

Analyze the command, exit code, and output. An exit code of 127 typically means "command not found".
Your response MUST be a single, raw JSON object with two keys: "corrected_command" and "explanation".
Do NOT include any other text, markdown, or conversational filler.

Example Response:
{{
  "corrected_command": "ls -a",
  "explanation": "The command 'lsa' was likely a typo for 'ls'."
}}"""


def build_retry_prompt(command, output, exit_code):
    """Stricter prompt for the second attempt. No example."""
    return f"""Your previous response was not valid JSON. You MUST try again.
The user's command was: {command}
It failed with exit code: {exit_code}
The command output was: {output}

Provide a direct JSON object response with the keys "corrected_command" and "explanation".
DO NOT write any text other than the JSON object itself."""
