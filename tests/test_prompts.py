"""Tests for the prompt templates."""

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from prompts import build_prompt, build_retry_prompt


class TestBuildPrompt:
    def test_includes_inputs(self):
        prompt = build_prompt("lsa -l", "lsa: command not found", 127)
        assert "- Command: lsa -l" in prompt
        assert "- Exit Code: 127" in prompt
        assert "- Command Output: lsa: command not found" in prompt

    def test_explains_exit_127(self):
        prompt = build_prompt("x", "", 1)
        assert "127" in prompt
        assert "command not found" in prompt

    def test_json_only_mandate(self):
        prompt = build_prompt("x", "", 1)
        assert '"corrected_command"' in prompt
        assert '"explanation"' in prompt
        assert "single, raw JSON object" in prompt
        assert "Do NOT include any other text" in prompt

    def test_has_worked_example(self):
        prompt = build_prompt("x", "", 1)
        assert "Example Response:" in prompt
        assert '"corrected_command": "ls -a"' in prompt

    def test_inputs_embedded_verbatim(self):
        """Braces, percent signs and quotes survive formatting untouched."""
        cmd = "awk '{print $1}' %s %d"
        out = 'error: {"weird": true} 100% "quoted"\n\x1b[31mred\x1b[0m'
        prompt = build_prompt(cmd, out, 2)
        assert cmd in prompt
        assert out in prompt


class TestBuildRetryPrompt:
    def test_says_previous_was_invalid(self):
        prompt = build_retry_prompt("x", "", 1)
        assert "previous response was not valid JSON" in prompt

    def test_restates_inputs(self):
        prompt = build_retry_prompt("git stauts", "git: 'stauts' is not a git command", 1)
        assert "git stauts" in prompt
        assert "exit code: 1" in prompt
        assert "'stauts' is not a git command" in prompt

    def test_keys_repeated_without_example(self):
        prompt = build_retry_prompt("x", "", 1)
        assert '"corrected_command"' in prompt
        assert '"explanation"' in prompt
        assert "Example" not in prompt
        assert "ls -a" not in prompt

    def test_differs_from_standard(self):
        args = ("lsa -l", "lsa: command not found", 127)
        assert build_retry_prompt(*args) != build_prompt(*args)
        assert len(build_retry_prompt(*args)) < len(build_prompt(*args))
