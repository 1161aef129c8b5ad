# src/cies/knowledge/codec.py

"""
Term codec for the fact text format.

A fact is one line: ``predicate(arg, arg, ...).`` optionally followed by
``% comment``. Strings are single-quoted with internal quotes doubled,
booleans are bare ``true``/``false`` and numbers are plain decimal text.

The decoder is more lenient than the encoder: it also accepts hand-written
lines and legacy triple-quoted (``'''...'''``) strings.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Iterator, List, Optional, Tuple

from pydantic import ValidationError

from cies.knowledge.schema import Fact, FactValue

logger = logging.getLogger(__name__)

COMMENT_MARKER = "%"
RULE_SEPARATOR = ":-"
QUOTE = "'"
TRIPLE_QUOTE = "'''"
ESCAPE = "\\"

BARE_WORD_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9_]*$")
VARIABLE_PATTERN = re.compile(r"^[A-Z_][a-zA-Z0-9_]*$")
NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
CLAUSE_PATTERN = re.compile(r"^([a-z][a-zA-Z0-9_]*)\((.*)\)$", re.DOTALL)

BOOLEAN_LITERALS = {"true": True, "false": False}

# Normalized fact identity: (predicate, normalized arguments)
FactKey = Tuple[str, Tuple[str, ...]]


class DecodeError(ValueError):
    """Raised internally when a candidate line is not a well-formed ground fact."""


# ----------------------------------------------------------------------------
# Encoding
# ----------------------------------------------------------------------------


def _quote_string(value: str) -> str:
    return f"{QUOTE}{value.replace(QUOTE, QUOTE * 2)}{QUOTE}"


def encode_value(value: FactValue) -> str:
    """Render a single argument value as a term token."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if BARE_WORD_PATTERN.match(value) and value not in BOOLEAN_LITERALS:
        return value
    return _quote_string(value)


def encode_fact(fact: Fact) -> str:
    """
    Encode a Fact as a single line of text.

    Args:
        fact: Fact to encode

    Returns:
        ``predicate(arg1, arg2, ...).`` with an optional `` % comment`` suffix.
    """
    args = ", ".join(encode_value(arg) for arg in fact.arguments)
    line = f"{fact.predicate}({args})."
    if fact.comment:
        line += f" {COMMENT_MARKER} {fact.comment}"
    return line


# ----------------------------------------------------------------------------
# Decoding
# ----------------------------------------------------------------------------


def _closing_triple_exists(text: str, start: int) -> bool:
    return text.find(TRIPLE_QUOTE, start + len(TRIPLE_QUOTE)) != -1


def _scan(text: str) -> Iterator[Tuple[int, str, bool]]:
    """
    Walk ``text`` yielding ``(index, char, quoted)`` for every character that
    sits outside an escape sequence, where ``quoted`` tells whether a quote
    state is open at that point.

    A triple quote toggles its own state and is checked before the single
    quote; it only opens at the start of an argument, so runs of doubled
    quotes inside a string never read as one. A backslash suppresses
    toggling for the character after it.

    Raises:
        DecodeError: If a quote is left open at the end of the text.
    """
    in_single = False
    in_triple = False
    escaped = False
    at_token_start = True
    i = 0
    while i < len(text):
        ch = text[i]
        if escaped:
            escaped = False
            i += 1
            continue
        if ch == ESCAPE:
            escaped = True
            at_token_start = False
            i += 1
            continue
        if not in_single and text.startswith(TRIPLE_QUOTE, i):
            if in_triple or (at_token_start and _closing_triple_exists(text, i)):
                in_triple = not in_triple
                at_token_start = False
                i += len(TRIPLE_QUOTE)
                continue
        if ch == QUOTE and not in_triple:
            in_single = not in_single
            at_token_start = False
            i += 1
            continue

        quoted = in_single or in_triple
        if not quoted:
            at_token_start = ch in ",(" or (ch.isspace() and at_token_start)
        yield i, ch, quoted
        i += 1

    if in_single or in_triple or escaped:
        raise DecodeError("unbalanced quotes")


def split_arguments(text: str) -> List[str]:
    """Split an argument list on top-level commas, respecting quote nesting."""
    parts = []
    start = 0
    for i, ch, quoted in _scan(text):
        if ch == "," and not quoted:
            parts.append(text[start:i].strip())
            start = i + 1
    parts.append(text[start:].strip())
    return parts


def _split_comment(line: str) -> Tuple[str, Optional[str]]:
    for i, ch, quoted in _scan(line):
        if ch == COMMENT_MARKER and not quoted:
            return line[:i].rstrip(), line[i + 1 :].strip()
    return line, None


def unwrap_token(token: str) -> Tuple[str, bool]:
    """
    Strip matching triple or single quotes from a token and undouble
    internal quotes. Backslashes are kept as written.

    Returns:
        Tuple of (unwrapped text, whether the token was quoted).
    """
    token = token.strip()
    if (
        len(token) >= 2 * len(TRIPLE_QUOTE)
        and token.startswith(TRIPLE_QUOTE)
        and token.endswith(TRIPLE_QUOTE)
    ):
        return token[3:-3].replace(QUOTE * 2, QUOTE), True
    if len(token) >= 2 and token.startswith(QUOTE) and token.endswith(QUOTE):
        return token[1:-1].replace(QUOTE * 2, QUOTE), True
    return token, False


def canonical_number(text: str) -> Optional[str]:
    """Return the canonical decimal form of numeric-looking text, else None."""
    if not NUMERIC_PATTERN.match(text):
        return None
    try:
        return format(Decimal(text).normalize(), "f")
    except InvalidOperation:
        return None


def normalize_argument(token: str) -> str:
    """
    Normalize a raw argument token for equality comparison.

    Quotes are stripped, numbers are canonicalized (``98.0`` == ``98``),
    ``true``/``false`` pass through and everything else is case-folded.
    """
    text, _ = unwrap_token(token)
    text = text.strip()
    number = canonical_number(text)
    if number is not None:
        return number
    if text in BOOLEAN_LITERALS:
        return text
    return text.lower()


def normalize_value(value: FactValue) -> str:
    """Normalize a structured value the same way a decoded token is normalized."""
    return normalize_argument(encode_value(value))


def fact_key(fact: Fact) -> FactKey:
    """Identity of a fact under the normalized-equality rule (comments ignored)."""
    return fact.predicate, tuple(normalize_value(arg) for arg in fact.arguments)


def _parse_token(token: str) -> FactValue:
    if not token:
        raise DecodeError("empty argument")
    text, quoted = unwrap_token(token)
    if quoted:
        return text
    if text in BOOLEAN_LITERALS:
        return BOOLEAN_LITERALS[text]
    if NUMERIC_PATTERN.match(text):
        if re.search(r"[.eE]", text):
            return float(text)
        return int(text)
    if VARIABLE_PATTERN.match(text):
        raise DecodeError(f"free variable '{text}' in fact")
    if BARE_WORD_PATTERN.match(text):
        return text
    raise DecodeError(f"unsupported term '{text}'")


def decode_line(line: str) -> Optional[Fact]:
    """
    Decode one line of fact text.

    Args:
        line: Raw line from the fact store

    Returns:
        The decoded Fact, or None if the line is blank, a comment, a rule
        clause or otherwise malformed. Malformed lines never raise.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_MARKER):
        return None

    try:
        clause, comment = _split_comment(stripped)
        if not clause.endswith(".") or RULE_SEPARATOR in clause:
            return None

        match = CLAUSE_PATTERN.match(clause[:-1].rstrip())
        if not match:
            raise DecodeError("not a predicate call")

        predicate, arg_text = match.groups()
        arguments = [_parse_token(token) for token in split_arguments(arg_text)]
        return Fact(predicate=predicate, arguments=arguments, comment=comment or None)
    except (DecodeError, ValidationError) as e:
        logger.debug(f"Skipping undecodable line {stripped[:80]!r}: {e}")
        return None


def decode_text(text: str) -> List[Fact]:
    """Decode every fact line in a block of text, skipping everything else."""
    facts = []
    for line in text.splitlines():
        fact = decode_line(line)
        if fact is not None:
            facts.append(fact)
    return facts
