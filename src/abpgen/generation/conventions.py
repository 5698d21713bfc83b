"""ABP naming conventions: HTTP verbs by method-name prefix and primitive types.

ABP's auto API controllers pick an HTTP verb from the first word of an
application-service method and drop that word (plus ``Async``) when building
the route. The table below is the convention set abpgen generates
controllers against:

=========  ==========================================
Verb       Method-name prefixes (checked in order)
=========  ==========================================
GET        ``Get``
PUT        ``Put``, ``Update``
DELETE     ``Delete``, ``Remove``
POST       ``Create``, ``Add``, ``Insert``, ``Post``
PATCH      ``Patch``
=========  ==========================================

Names that match no prefix default to ``POST``.

The second half of the module answers "is this C# type primitive-like?",
which decides whether an ``id`` parameter is a single route segment or a
composite key expanded into one segment per property.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from abpgen.generation.source_parser import TypeRegistry


DEFAULT_HTTP_VERB = "POST"

CONVENTIONAL_PREFIXES: dict[str, tuple[str, ...]] = {
    "GET": ("Get",),
    "PUT": ("Put", "Update"),
    "DELETE": ("Delete", "Remove"),
    "POST": ("Create", "Add", "Insert", "Post"),
    "PATCH": ("Patch",),
}


def get_conventional_verb(method_name: str) -> str:
    """Return the HTTP verb (upper case) ABP infers for *method_name*.

    Example::

        >>> get_conventional_verb("GetListAsync")
        'GET'
        >>> get_conventional_verb("RemoveAuthorAsync")
        'DELETE'
        >>> get_conventional_verb("PublishAsync")
        'POST'
    """
    for verb, prefixes in CONVENTIONAL_PREFIXES.items():
        for prefix in prefixes:
            if method_name.startswith(prefix):
                return verb
    return DEFAULT_HTTP_VERB


def remove_http_method_prefix(method_name: str, verb: str) -> str:
    """Remove the first conventional prefix of *verb* that *method_name* starts with.

    Example::

        >>> remove_http_method_prefix("GetListAsync", "GET")
        'ListAsync'
        >>> remove_http_method_prefix("PublishAsync", "POST")
        'PublishAsync'
    """
    for prefix in CONVENTIONAL_PREFIXES.get(verb.upper(), ()):
        if method_name.startswith(prefix):
            return method_name[len(prefix):]
    return method_name


def remove_postfix(text: str, postfix: str) -> str:
    """Remove a single trailing *postfix* (ordinal comparison)."""
    if postfix and text.endswith(postfix):
        return text[: -len(postfix)]
    return text


# ---------------------------------------------------------------------------
# Primitive types
# ---------------------------------------------------------------------------

# C# keyword aliases and their System.* names.
_KEYWORD_ALIASES: dict[str, str] = {
    "bool": "System.Boolean",
    "byte": "System.Byte",
    "sbyte": "System.SByte",
    "char": "System.Char",
    "decimal": "System.Decimal",
    "double": "System.Double",
    "float": "System.Single",
    "int": "System.Int32",
    "uint": "System.UInt32",
    "nint": "System.IntPtr",
    "nuint": "System.UIntPtr",
    "long": "System.Int64",
    "ulong": "System.UInt64",
    "short": "System.Int16",
    "ushort": "System.UInt16",
    "string": "System.String",
    "object": "System.Object",
}

_PRIMITIVE_EXTENDED: frozenset[str] = frozenset({
    "System.Boolean",
    "System.Byte",
    "System.SByte",
    "System.Char",
    "System.Double",
    "System.Single",
    "System.Int16",
    "System.UInt16",
    "System.Int32",
    "System.UInt32",
    "System.Int64",
    "System.UInt64",
    "System.IntPtr",
    "System.UIntPtr",
    "System.String",
    "System.Decimal",
    "System.DateTime",
    "System.DateTimeOffset",
    "System.TimeSpan",
    "System.Guid",
})

_SYSTEM_SIMPLE_NAMES: dict[str, str] = {
    name.rsplit(".", 1)[1]: name for name in _PRIMITIVE_EXTENDED
}


def strip_nullable(type_name: str) -> str:
    """Unwrap ``T?`` and ``Nullable<T>`` / ``System.Nullable`1[T]`` spellings."""
    name = type_name.strip()
    if name.endswith("?"):
        return name[:-1].strip()
    for opener in ("System.Nullable<", "Nullable<"):
        if name.startswith(opener) and name.endswith(">"):
            return name[len(opener):-1].strip()
    if name.startswith("System.Nullable`1[") and name.endswith("]"):
        inner = name[len("System.Nullable`1["):-1]
        # Assembly-qualified form: [[System.Guid, System.Private.CoreLib, ...]]
        return inner.strip("[]").split(",", 1)[0].strip()
    return name


def qualify_system_type(type_name: str) -> Optional[str]:
    """Return the ``System.*`` name for a keyword or System simple name, else ``None``."""
    name = strip_nullable(type_name)
    if name in _KEYWORD_ALIASES:
        return _KEYWORD_ALIASES[name]
    if name in _PRIMITIVE_EXTENDED:
        return name
    return _SYSTEM_SIMPLE_NAMES.get(name)


def is_primitive_extended(
    type_name: str,
    types: Optional[TypeRegistry] = None,
    include_enums: bool = True,
) -> bool:
    """Return True if *type_name* is a primitive-like type.

    Primitive-like means a CLR primitive, ``string``, ``decimal``,
    ``DateTime``, ``DateTimeOffset``, ``TimeSpan`` or ``Guid`` (nullable
    forms included) and, when *include_enums* is set, any enum found in
    *types*.
    """
    name = strip_nullable(type_name)
    if qualify_system_type(name) in _PRIMITIVE_EXTENDED:
        return True
    if include_enums and types is not None:
        from abpgen.models import TypeKind

        resolved = types.resolve(name)
        if resolved is not None and resolved.kind == TypeKind.ENUM:
            return True
    return False
