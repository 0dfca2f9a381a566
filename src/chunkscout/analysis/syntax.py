"""tree-sitter JavaScript parsing and node helpers.

The helpers here turn raw syntax nodes into the values the analysis cares
about: decoded string literals, canonical numeric literals and normalized
member-access paths.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
import math
import re

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser, Tree

from .errors import ScriptParseError
from .walk import walk

__all__ = [
    "FUNCTION_TYPES",
    "MEMBER_TYPES",
    "METHOD_TYPE",
    "function_source",
    "is_plain_method",
    "literal_value",
    "node_text",
    "number_value",
    "parameter_count",
    "parse_script",
    "path_text",
    "string_value",
]

# Older grammar releases named function expressions plain ``function``.
FUNCTION_TYPES = frozenset(
    {"function", "function_expression", "generator_function", "arrow_function"}
)
MEMBER_TYPES = frozenset({"member_expression", "subscript_expression"})
METHOD_TYPE = "method_definition"
_METHOD_MODIFIERS = frozenset({"get", "set", "*"})

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
_LINE_CONTINUATIONS = ("\r\n", "\n", "\r", "\u2028", "\u2029")
_WHITESPACE = re.compile(r"\s+")


@lru_cache(maxsize=1)
def _language() -> Language:
    return Language(tree_sitter_javascript.language())


def parse_script(
    text: str,
    *,
    label: str | None = None,
    allow_errors: bool = False,
) -> Tree:
    """Parse ``text`` into a tree-sitter syntax tree.

    A fresh :class:`~tree_sitter.Parser` is built per call; parsers are not
    safe to share between threads.

    Raises:
        ScriptParseError: If the source contains syntax errors and
            ``allow_errors`` is false.
    """

    parser = Parser(_language())
    tree = parser.parse(text.encode("utf-8"))
    if tree.root_node.has_error and not allow_errors:
        line, column = _first_error_position(tree.root_node)
        raise ScriptParseError(
            "Source is not valid JavaScript",
            label=label,
            line=line,
            column=column,
        )
    return tree


def _first_error_position(root: Node) -> tuple[int | None, int | None]:
    for node in walk(root):
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            return row + 1, column + 1
    # Missing tokens are anonymous, so the walk can miss them.
    return None, None


def node_text(node: Node) -> str:
    """Return the source text spanned by ``node``."""

    raw = node.text
    return raw.decode("utf-8") if raw is not None else ""


def string_value(node: Node) -> str:
    """Return the decoded value of a ``string`` literal node."""

    parts: list[str] = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(node_text(child))
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(node_text(child)))
        elif child.type == "html_character_reference":
            parts.append(node_text(child))
    return "".join(parts)


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if not body:
        return ""
    if body in _LINE_CONTINUATIONS:
        return ""
    head = body[0]
    if head in _SIMPLE_ESCAPES and (head != "0" or len(body) == 1):
        return _SIMPLE_ESCAPES[head]
    if head == "x" and len(body) == 3:
        return chr(int(body[1:], 16))
    if head == "u":
        digits = body[2:-1] if body.startswith("u{") else body[1:]
        try:
            return chr(int(digits, 16))
        except ValueError:
            return body
    if head.isdigit():
        # Legacy octal escape.
        return chr(int(body, 8)) if all(c in "01234567" for c in body) else body
    return body


def number_value(node: Node) -> str:
    """Return the canonical text of a ``number`` literal node.

    Mirrors how JavaScript prints numbers, so ``0x10`` becomes ``16`` and
    ``1.0`` becomes ``1``. BigInt and unparsable literals keep their source
    text.

    Example:
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script("x = 0x1f")
        >>> number_value(next(walk(tree.root_node, "number")))
        '31'
    """

    raw = node_text(node).replace("_", "")
    if raw.endswith("n"):
        return raw
    lowered = raw.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return str(int(lowered, 0))
    if len(raw) > 1 and raw[0] == "0" and raw.isdigit():
        # Legacy octal when every digit allows it, decimal otherwise.
        if all(c in "01234567" for c in raw):
            return str(int(raw, 8))
        return str(int(raw, 10))
    try:
        value = float(raw)
    except ValueError:
        return raw
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return _js_number_text(value)


def _js_number_text(value: float) -> str:
    """Format a non-integral float the way JavaScript's ``Number#toString`` does.

    Example:
        >>> [_js_number_text(v) for v in (1e-7, 0.00001, 1.5, 1.5e300)]
        ['1e-7', '0.00001', '1.5', '1.5e+300']
    """

    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if math.isnan(value):
        return "NaN"
    sign = "-" if value < 0 else ""
    # ``repr`` yields the shortest round-tripping digits.
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        power = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if power >= 0 else '-'}{abs(power)}"
    return sign + text


def literal_value(node: Node) -> tuple[str, bool] | None:
    """Return ``(value, is_string)`` for string and number literals."""

    if node.type == "string":
        return string_value(node), True
    if node.type == "number":
        return number_value(node), False
    return None


def path_text(node: Node) -> str:
    """Return the normalized textual form of a member-access path.

    Whitespace and comments never influence the result, and subscripts are
    rendered with canonical literal values. ``a . b`` and ``a.b`` share one
    key while ``a["b"]`` keeps its own.

    Example:
        >>> from chunkscout.analysis.syntax import parse_script
        >>> tree = parse_script("a . b [ 'c' ] = 1")
        >>> left = tree.root_node.named_children[0].named_children[0]
        >>> path_text(left.child_by_field_name("left"))
        'a.b["c"]'
    """

    if node.type == "member_expression":
        target = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        separator = "?." if _is_optional(node) else "."
        return f"{path_text(target)}{separator}{node_text(prop)}"
    if node.type == "subscript_expression":
        target = node.child_by_field_name("object")
        index = node.child_by_field_name("index")
        separator = "?.[" if _is_optional(node) else "["
        return f"{path_text(target)}{separator}{_index_text(index)}]"
    if node.type == "parenthesized_expression" and node.named_child_count == 1:
        return path_text(node.named_children[0])
    return _WHITESPACE.sub("", node_text(node))


def _index_text(node: Node) -> str:
    literal = literal_value(node)
    if literal is None:
        return path_text(node)
    value, is_string = literal
    if is_string:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def _is_optional(node: Node) -> bool:
    return any(child.type == "optional_chain" for child in node.children)


def parameter_count(node: Node) -> int:
    """Return the number of formal parameters declared by a function node."""

    single = node.child_by_field_name("parameter")
    if single is not None:
        return 1
    params = node.child_by_field_name("parameters")
    if params is None:
        return 0
    return sum(1 for child in params.named_children if child.type != "comment")


def is_plain_method(node: Node) -> bool:
    """Return ``True`` for object or class methods other than accessors.

    Getters, setters and generator methods do not count.
    """

    if node.type != METHOD_TYPE:
        return False
    return not any(
        not child.is_named and child.type in _METHOD_MODIFIERS
        for child in node.children
    )


def function_source(node: Node) -> str:
    """Return ``node`` as a standalone function expression.

    Methods are rewritten as ``function(params) body``; any other node keeps
    its source text.

    Example:
        >>> tree = parse_script("o = {u(e) { return e; }}")
        >>> function_source(next(walk(tree.root_node, METHOD_TYPE)))
        'function(e) { return e; }'
    """

    if node.type != METHOD_TYPE:
        return node_text(node)
    params = node.child_by_field_name("parameters")
    body = node.child_by_field_name("body")
    keyword = "function"
    if any(child.type == "async" for child in node.children):
        keyword = "async function"
    params_text = node_text(params) if params is not None else "()"
    body_text = node_text(body) if body is not None else "{}"
    return f"{keyword}{params_text} {body_text}"
