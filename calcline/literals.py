# literals.py
"""String-literal aware helpers shared by the rewrite passes.

Canonical expressions may carry double-quoted JSON string literals
(the argument of __const("...")). Every textual rewrite after the
constant-embed conversion has to leave those literals untouched.
"""

import logging

from . import error as E

logger = logging.getLogger(__name__)


def literal_end(text, start):
    """Return the index one past the closing quote of the literal at text[start].

    An unterminated literal runs to the end of the string.
    """
    b = start + 1
    escaped = False
    while b < len(text):
        ch = text[b]
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == '"':
            return b + 1
        b += 1
    return len(text)


def split_string_literals(text):
    """Split text into (is_literal, chunk) pairs; literal chunks keep their quotes."""
    parts = []
    buf = ""
    b = 0
    while b < len(text):
        if text[b] == '"':
            if buf:
                parts.append((False, buf))
                buf = ""
            end = literal_end(text, b)
            parts.append((True, text[b:end]))
            b = end
            continue
        buf += text[b]
        b += 1
    if buf:
        parts.append((False, buf))
    return parts


def map_outside_strings(text, rewrite):
    """Apply rewrite() to every chunk of text that is not inside a string literal."""
    if '"' not in text:
        return rewrite(text)
    return "".join(chunk if is_literal else rewrite(chunk)
                   for is_literal, chunk in split_string_literals(text))


def strip_whitespace_outside_strings(text):
    return map_outside_strings(text, lambda chunk: "".join(chunk.split()))


def fixed_point(rewrite, text, limit=None):
    """Run rewrite() until the text stops changing.

    The number of passes is capped (default 2 * len(text) + 2); a rewrite
    that keeps changing the text past the cap raises RewriteLimitError
    instead of looping forever.
    """
    if limit is None:
        limit = 2 * len(text) + 2
    current = text
    for _ in range(limit):
        rewritten = rewrite(current)
        if rewritten == current:
            return current
        current = rewritten
    logger.debug(f"Rewrite did not settle after {limit} passes: {text!r}")
    raise E.RewriteLimitError(text, code="3040", equation=text)
