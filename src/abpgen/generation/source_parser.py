"""Regex-based extraction of C# type metadata.

abpgen does not need a full C# compiler: it needs the namespace, the type
declarations, their base types, public auto-properties and public method
signatures of ordinary entity and application-service files. The parser
works in three passes over the text:

1. Comments are removed and string/char literals blanked, so braces inside
   them cannot confuse block matching. Attribute lists (``[FromBody]``,
   ``[Required]``) are removed.
2. Type declarations are found with :data:`_TYPE_DECL_RE`; each body is cut
   out by brace matching and every nested block is collapsed to ``{}``,
   which leaves one member declaration per ``;``/``}``-terminated chunk.
3. Each chunk is matched against the method and property patterns.

Everything discovered in a solution is collected in a :class:`TypeRegistry`
so that parameter types can later be resolved to enums or composite keys.
"""

from __future__ import annotations

import re
from collections import defaultdict
from pathlib import Path
from typing import Iterable, Iterator, Optional

from abpgen.exceptions import SourceParseError
from abpgen.generation.conventions import qualify_system_type, strip_nullable
from abpgen.generation.file_finder import find_files
from abpgen.models import MethodInfo, ParameterInfo, PropertyInfo, TypeInfo, TypeKind
from abpgen.output import debug


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Strings and chars are kept as group 1/2 so the substitution can blank them;
# anything else matched is a comment.
_COMMENT_OR_LITERAL_RE = re.compile(
    r'([$@]*"(?:""|\\.|[^"\\\n])*")'
    r"|('(?:\\.|[^'\\\n])')"
    r"|//[^\n]*"
    r"|/\*.*?\*/",
    re.S,
)

_ATTRIBUTE_RE = re.compile(r"\[\s*[A-Za-z_][\w.]*\s*(?:\([^\]]*\))?\s*(?:,\s*[A-Za-z_][\w.]*\s*(?:\([^\]]*\))?\s*)*\]")

_NAMESPACE_RE = re.compile(r"^\s*namespace\s+([\w.]+)\s*[;{]", re.M)

_USING_RE = re.compile(r"^\s*(?:global\s+)?using\s+(?:static\s+)?([\w.]+)\s*;", re.M)

_TYPE_DECL_RE = re.compile(
    r"^[ \t]*(?P<modifiers>(?:(?:public|internal|protected|private|abstract|sealed|static|partial|readonly|new|unsafe)\s+)*)"
    r"(?P<kind>class|interface|enum|struct|record(?:\s+(?:class|struct))?)\s+"
    r"(?P<name>\w+)(?P<generics>\s*<[^>{;]*>)?"
    r"(?P<ctor>\s*\((?P<ctor_params>[^()]*(?:\([^()]*\)[^()]*)*)\))?"
    r"(?:\s*:\s*(?P<bases>[^{;]+?))?"
    r"\s*(?:where\s+[^{;]+)?(?P<open>[{;])",
    re.M,
)

_MEMBER_MODIFIERS = (
    "public", "protected", "internal", "private", "virtual", "override",
    "abstract", "static", "async", "new", "sealed", "extern", "partial",
    "required", "readonly", "unsafe",
)

_MODIFIERS_GROUP = r"(?P<modifiers>(?:(?:" + "|".join(_MEMBER_MODIFIERS) + r")\s+)*)"

_TYPE_PATTERN = r"(?P<type>[\w.]+(?:\s*<.*?>)?(?:\s*\[\s*,*\s*\])*\??)"

_METHOD_RE = re.compile(
    r"^\s*" + _MODIFIERS_GROUP + _TYPE_PATTERN + r"\s+"
    r"(?P<name>\w+)\s*(?:<[^<>()]*>)?\s*"
    r"\((?P<params>[^()]*(?:\([^()]*\)[^()]*)*)\)",
    re.S,
)

_PROPERTY_RE = re.compile(
    r"^\s*" + _MODIFIERS_GROUP + _TYPE_PATTERN + r"\s+"
    r"(?P<name>\w+)\s*(?:\{\s*\}|=>)",
    re.S,
)

_RESERVED_TYPE_WORDS = frozenset(_MEMBER_MODIFIERS) | {
    "class", "interface", "enum", "struct", "record", "event", "delegate",
    "operator", "implicit", "explicit", "return", "using", "namespace",
}

_PARAMETER_MODIFIERS = ("this", "ref", "out", "in", "params", "scoped")

_KIND_BY_KEYWORD = {
    "class": TypeKind.CLASS,
    "interface": TypeKind.INTERFACE,
    "enum": TypeKind.ENUM,
    "struct": TypeKind.STRUCT,
    "record": TypeKind.RECORD,
}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _strip_noise(source: str) -> str:
    """Remove comments and attributes; blank string and char literals."""

    def _replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return '""'
        if match.group(2) is not None:
            return "' '"
        # Keep line structure for ^-anchored patterns.
        return "\n" * match.group(0).count("\n")

    text = _COMMENT_OR_LITERAL_RE.sub(_replace, source)
    return _ATTRIBUTE_RE.sub("", text)


def _find_block_end(text: str, open_index: int) -> int:
    """Return the index of the ``}`` matching the ``{`` at *open_index*."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    raise SourceParseError("Unbalanced braces in type declaration")


def _collapse_nested(body: str) -> str:
    """Replace the content of every nested block in *body* with nothing."""
    out: list[str] = []
    depth = 0
    for char in body:
        if char == "{":
            if depth == 0:
                out.append(char)
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                out.append(char)
        elif depth == 0:
            out.append(char)
    return "".join(out)


def _split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split *text* on *separator* outside of ``<>``, ``()`` and ``[]``."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "<([":
            depth += 1
        elif char in ">)]":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    tail = "".join(current)
    if tail.strip():
        parts.append(tail)
    return parts


def _normalize_type(type_name: str) -> str:
    """Collapse whitespace inside a type spelling (``Task< List<int> >`` -> ``Task<List<int>>``)."""
    return re.sub(r"\s+", "", type_name)


def _split_modifiers(modifiers: str) -> set[str]:
    return set(modifiers.split())


# ---------------------------------------------------------------------------
# Member parsing
# ---------------------------------------------------------------------------


def _qualify(type_name: str, namespace: str, local_types: set[str]) -> str:
    """Best-effort fully-qualified name for *type_name*."""
    nullable = type_name.endswith("?")
    bare = strip_nullable(type_name)
    system_name = qualify_system_type(bare)
    if system_name is not None:
        qualified = system_name
    elif bare in local_types and namespace:
        qualified = f"{namespace}.{bare}"
    else:
        qualified = bare
    return qualified + "?" if nullable else qualified


def parse_parameters(
    params: str,
    namespace: str = "",
    local_types: Optional[set[str]] = None,
) -> list[ParameterInfo]:
    """Parse a C# parameter list (the text between the parentheses)."""
    result: list[ParameterInfo] = []
    for raw in _split_top_level(params):
        declaration = raw.strip()
        if not declaration:
            continue
        default: Optional[str] = None
        pieces = _split_top_level(declaration, "=")
        if len(pieces) > 1:
            declaration = pieces[0].strip()
            default = "=".join(pieces[1:]).strip()

        tokens = declaration.split()
        while tokens and tokens[0] in _PARAMETER_MODIFIERS:
            tokens.pop(0)
        if len(tokens) < 2:
            raise SourceParseError(f"Cannot parse parameter '{raw.strip()}'")

        name = tokens[-1]
        type_name = _normalize_type(" ".join(tokens[:-1]))
        result.append(ParameterInfo(
            name=name,
            type=type_name,
            full_type=_qualify(type_name, namespace, local_types or set()),
            default=default,
        ))
    return result


def _iter_chunks(body: str) -> Iterator[str]:
    """Yield member declarations from a collapsed type body."""
    for chunk in re.split(r"(?<=[;}])", body):
        if chunk.strip():
            yield chunk


def _parse_members(
    body: str,
    kind: TypeKind,
    namespace: str,
    local_types: set[str],
) -> tuple[list[PropertyInfo], list[MethodInfo]]:
    properties: list[PropertyInfo] = []
    methods: list[MethodInfo] = []
    # Interface members are public without saying so.
    needs_public = kind != TypeKind.INTERFACE

    for chunk in _iter_chunks(body):
        method_match = _METHOD_RE.match(chunk)
        property_match = _PROPERTY_RE.match(chunk)

        # A property chunk never has parentheses before its accessor block;
        # prefer whichever pattern matched earlier in the chunk.
        if method_match and (not property_match or method_match.end("name") <= property_match.end("name")):
            match, is_method = method_match, True
        elif property_match:
            match, is_method = property_match, False
        else:
            continue

        modifiers = _split_modifiers(match.group("modifiers"))
        type_name = _normalize_type(match.group("type"))
        name = match.group("name")

        if type_name in _RESERVED_TYPE_WORDS or name in _RESERVED_TYPE_WORDS:
            continue
        if "static" in modifiers:
            continue
        if needs_public and "public" not in modifiers:
            continue
        if not needs_public and "private" in modifiers:
            continue

        if is_method:
            methods.append(MethodInfo(
                name=name,
                return_type=type_name,
                parameters=parse_parameters(match.group("params"), namespace, local_types),
                is_async="async" in modifiers or type_name.startswith(("Task", "ValueTask")),
            ))
        else:
            properties.append(PropertyInfo(name=name, type=type_name))

    return properties, methods


def _parse_enum_members(body: str) -> list[str]:
    members: list[str] = []
    for item in _split_top_level(body.strip().strip("{}")):
        name = item.split("=", 1)[0].strip()
        if re.fullmatch(r"\w+", name):
            members.append(name)
    return members


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_source(source: str, source_file: str = "") -> list[TypeInfo]:
    """Parse C# *source* and return every type declaration found, in order.

    Args:
        source: File content.
        source_file: Path recorded on each :class:`~abpgen.models.TypeInfo`.

    Returns:
        A list of :class:`~abpgen.models.TypeInfo`; empty when the source
        declares no type.

    Raises:
        SourceParseError: If a declaration's braces do not balance or a
            parameter list cannot be parsed.
    """
    text = _strip_noise(source)

    namespaces = [(m.start(), m.group(1)) for m in _NAMESPACE_RE.finditer(text)]
    usings = sorted({m.group(1) for m in _USING_RE.finditer(text)})

    declarations = list(_TYPE_DECL_RE.finditer(text))
    local_types = {m.group("name") for m in declarations}

    types: list[TypeInfo] = []
    for decl in declarations:
        namespace = ""
        for position, name in namespaces:
            if position < decl.start():
                namespace = name

        kind = _KIND_BY_KEYWORD[decl.group("kind").split()[0]]
        bases = [
            _normalize_type(b)
            for b in _split_top_level(decl.group("bases") or "")
            if b.strip()
        ]

        properties: list[PropertyInfo] = []
        methods: list[MethodInfo] = []
        enum_members: list[str] = []

        if decl.group("ctor_params"):
            # Positional record: each primary-constructor parameter is a property.
            for param in parse_parameters(decl.group("ctor_params"), namespace, local_types):
                properties.append(PropertyInfo(name=param.name, type=param.type))

        if decl.group("open") == "{":
            open_index = decl.end("open") - 1
            try:
                close_index = _find_block_end(text, open_index)
            except SourceParseError as exc:
                raise SourceParseError(
                    f"{exc} ({decl.group('name')} in {source_file or '<source>'})"
                ) from None
            body = text[open_index + 1:close_index]
            if kind == TypeKind.ENUM:
                enum_members = _parse_enum_members(body)
            else:
                member_props, methods = _parse_members(
                    _collapse_nested(body), kind, namespace, local_types,
                )
                properties.extend(member_props)

        types.append(TypeInfo(
            namespace=namespace,
            name=decl.group("name"),
            kind=kind,
            base_types=bases,
            properties=properties,
            methods=methods,
            enum_members=enum_members,
            usings=usings,
            source_file=source_file,
        ))

    return types


def parse_file(path: str | Path) -> list[TypeInfo]:
    """Read and parse a C# file.

    Raises:
        SourceParseError: If the file cannot be read or parsed.
    """
    file_path = Path(path)
    try:
        source = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceParseError(f"Cannot read source file {file_path}: {exc}") from exc
    return parse_source(source, str(file_path))


def parse_primary_type(path: str | Path, type_name: Optional[str] = None) -> TypeInfo:
    """Return the type named *type_name* in *path* (or the first type).

    Raises:
        SourceParseError: If the file declares no type, or none named
            *type_name*.
    """
    types = parse_file(path)
    if not types:
        raise SourceParseError(f"No type declaration found in {path}")
    if type_name is None:
        return types[0]
    for type_info in types:
        if type_info.name == type_name:
            return type_info
    raise SourceParseError(f"Type '{type_name}' is not declared in {path}")


class TypeRegistry:
    """All types discovered in a solution, looked up by full or simple name."""

    def __init__(self, types: Iterable[TypeInfo] = ()) -> None:
        self._by_full_name: dict[str, TypeInfo] = {}
        self._by_simple_name: dict[str, list[TypeInfo]] = defaultdict(list)
        for type_info in types:
            self.add(type_info)

    def add(self, type_info: TypeInfo) -> None:
        self._by_full_name.setdefault(type_info.full_name, type_info)
        self._by_simple_name[type_info.name].append(type_info)

    def resolve(self, type_name: str) -> Optional[TypeInfo]:
        """Find *type_name* by full name first, then by its last segment.

        Nullable markers and generic arguments are ignored. When a simple
        name is declared in several namespaces the first one scanned wins.
        """
        name = strip_nullable(type_name)
        name = name.split("<", 1)[0]
        if name in self._by_full_name:
            return self._by_full_name[name]
        candidates = self._by_simple_name.get(name.rsplit(".", 1)[-1])
        return candidates[0] if candidates else None

    def __contains__(self, type_name: object) -> bool:
        return isinstance(type_name, str) and self.resolve(type_name) is not None

    def __iter__(self) -> Iterator[TypeInfo]:
        return iter(self._by_full_name.values())

    def __len__(self) -> int:
        return len(self._by_full_name)


def scan_types(root: str | Path, exclude_patterns: Optional[list[str]] = None) -> TypeRegistry:
    """Parse every ``.cs`` file below *root* into a :class:`TypeRegistry`.

    Files that cannot be read or parsed are skipped with a debug message;
    a single broken file must not stop generation for the rest.
    """
    registry = TypeRegistry()
    for path in find_files(root, ["*.cs"], exclude_patterns):
        try:
            for type_info in parse_file(path):
                registry.add(type_info)
        except SourceParseError as exc:
            debug(f"Skipping {path}: {exc}")
    debug(f"Scanned {len(registry)} type(s) under {root}")
    return registry
