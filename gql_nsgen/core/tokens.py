"""Acronym-aware identifier splitting and the naming helpers built on it.

    >>> split_identifier("IPAMPrefix")
    ['IPAM', 'Prefix']
    >>> tokenize("HTTPServer")
    ['http', 'server']
    >>> snake_case("ipv4Address")
    'ipv_4_address'
"""

import keyword
import re

from .errors import UnnamableIdentifierError

# An uppercase run not followed by a lowercase letter stays together
# (IPAM in IPAMPrefix); otherwise at most one capital leads a lowercase run.
_TOKEN_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def split_identifier(name: str) -> list[str]:
    """Split an identifier into word tokens, keeping the original casing.

    Boundaries are placed between a lowercase and an uppercase letter, before
    the last capital of an uppercase run that is followed by a lowercase
    letter, and between letter and digit runs. Underscores and any other
    non-alphanumeric characters separate tokens and are dropped.

    Raises:
        UnnamableIdentifierError: If the identifier contains no letters or
            digits. It is a ValueError as well as a SchemaError.
    """
    tokens = _TOKEN_RE.findall(name)
    if not tokens:
        raise UnnamableIdentifierError(name)
    return tokens


def tokenize(name: str) -> list[str]:
    """Return the lower-cased token sequence used as grouping keys."""
    return [token.lower() for token in split_identifier(name)]


def snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case.

    Double underscores are kept as segment separators, so filter arguments
    such as ``name__value`` stay recognisable.
    """
    segments = [s for s in name.split("__") if s] or [name]
    return "__".join("_".join(tokenize(segment)) for segment in segments)


def pascal_case(name: str) -> str:
    """Convert any identifier to PascalCase, leaving acronyms intact."""
    return "".join(token[0].upper() + token[1:] for token in split_identifier(name))


def join_words(words: list[str] | tuple[str, ...]) -> str:
    """Re-join original-cased tokens as a PascalCase identifier."""
    return "".join(word[0].upper() + word[1:] for word in words)


def python_identifier(name: str) -> str:
    """Make a name usable as a Python identifier.

    Keywords get a trailing underscore and a leading digit gets an ``n``
    prefix.
    """
    if name and name[0].isdigit():
        name = f"n{name}"
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        return f"{name}_"
    return name
