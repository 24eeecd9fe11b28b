"""Pull the JSON answer out of free-form model text.

Models wrap their answer in reasoning, markdown fences or chatter. We take the
outermost brace span and leave validation to the caller.
"""


def extract_json(text):
    """Return text from the first '{' to the last '}' inclusive, or ''."""
    if not text:
        return ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or start > end:
        return ""
    return text[start:end + 1]
