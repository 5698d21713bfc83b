"""Naming and route helpers exposed to the Jinja2 templates.

These pure functions compute the names and REST routes that ABP's
conventional controllers would produce, so that generated controllers line
up with the routes the framework serves for the same application service.

* :func:`camel_case` -- camel-case each segment of a dotted identifier.
* :func:`is_ignored_property` -- properties never copied into DTOs.
* :func:`http_verb_label` -- ``[HttpGet]``-style attribute name for a method.
* :func:`derive_route` -- the relative route of a method, following the
  ``{id}`` / action / secondary-id rules of ABP's service convention.

:func:`register_template_functions` installs all four into a Jinja2
environment, both as globals (``{{ get_route(method) }}``) and as filters
(``{{ method | get_route }}``).
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Optional

from abpgen.generation.conventions import (
    get_conventional_verb,
    is_primitive_extended,
    remove_http_method_prefix,
    remove_postfix,
)
from abpgen.models import MethodInfo, ParameterInfo, PropertyInfo, TypeInfo, TypeKind
from abpgen.output import debug

if TYPE_CHECKING:
    from jinja2 import Environment

    from abpgen.generation.source_parser import TypeRegistry


# (name, type) pairs left out of generated DTOs. Multi-tenancy is handled
# by the framework, never by user input.
IGNORED_PROPERTIES: frozenset[tuple[str, str]] = frozenset({
    ("TenantId", "Guid?"),
})


def _camel_case_segment(text: str) -> str:
    if not text or text.isspace():
        return text
    if len(text) == 1:
        return text.lower()
    return text[0].lower() + text[1:]


def camel_case(text: str) -> str:
    """Camel-case every ``.``-separated segment of *text*.

    Applying the function twice gives the same result as applying it once.

    Example::

        >>> camel_case("Foo.BarBaz")
        'foo.barBaz'
    """
    return ".".join(_camel_case_segment(part) for part in text.split("."))


def is_ignored_property(prop: PropertyInfo) -> bool:
    """Return True if *prop* should be left out of generated DTOs."""
    return (prop.name, prop.type) in IGNORED_PROPERTIES


def http_verb_label(method_name: str) -> str:
    """Return the ASP.NET Core attribute name for *method_name*'s verb.

    Example::

        >>> http_verb_label("GetListAsync")
        'HttpGet'
        >>> http_verb_label("UpdateAsync")
        'HttpPut'
    """
    verb = get_conventional_verb(method_name)
    return f"Http{verb[0].upper()}{verb[1:].lower()}"


def _id_segments(param: ParameterInfo, types: Optional[TypeRegistry]) -> str:
    """Route segments contributed by the ``id`` parameter."""
    if is_primitive_extended(param.full_type, types) or is_primitive_extended(param.type, types):
        return "/{id}"

    composite = None
    if types is not None:
        composite = types.resolve(param.full_type) or types.resolve(param.type)
    if composite is None:
        debug(f"Cannot resolve id type '{param.full_type}', using a single {{id}} segment")
        return "/{id}"

    return "".join("/{" + name + "}" for name in _property_names(composite, types))


def _property_names(type_info: TypeInfo, types: TypeRegistry) -> list[str]:
    """Public property names of *type_info*, then those inherited from its bases.

    Bases are followed through *types*; a base outside the registry ends
    the walk, and so does an interface. A redeclared name is listed once,
    at its most derived place.
    """
    names: list[str] = []
    visited: set[str] = set()
    current: Optional[TypeInfo] = type_info
    while current is not None and current.full_name not in visited:
        visited.add(current.full_name)
        names.extend(p.name for p in current.properties if p.name not in names)
        base = types.resolve(current.base_type) if current.base_type else None
        current = base if base is not None and base.kind != TypeKind.INTERFACE else None
    return names


def derive_route(method: MethodInfo, types: Optional[TypeRegistry] = None) -> str:
    """Derive the relative REST route of *method*.

    1. A parameter named ``id`` adds ``/{id}``; when its type is a composite
       key, one ``/{Property}`` segment per public property instead.
    2. The conventional verb prefix and a trailing ``Async`` are removed
       from the method name.
    3. A non-empty remainder adds ``/{camelCasedAction}``, followed by
       ``/{xxxId}`` when exactly one parameter name ends with ``Id``.
    4. The leading ``/`` is removed.

    Args:
        method: The application-service method.
        types: Registry used to tell enums and composite keys apart from
            unknown types. Without it only built-in primitives are recognised.

    Example::

        GetAsync(Guid id)                          -> "{id}"
        CreateAsync(CreateBookDto input)           -> ""
        GetListAsync(Guid id, Guid bookId)         -> "{id}/list/{bookId}"
        GetListAsync(Guid id, Guid bookId, Guid authorId) -> "{id}/list"
    """
    url = ""

    id_param = next((p for p in method.parameters if p.name == "id"), None)
    if id_param is not None:
        url += _id_segments(id_param, types)

    verb = get_conventional_verb(method.name)
    action = remove_postfix(remove_http_method_prefix(method.name, verb), "Async")
    if action:
        url += f"/{camel_case(action)}"

        secondary_ids = [p for p in method.parameters if p.name.endswith("Id")]
        if len(secondary_ids) == 1:
            url += "/{" + secondary_ids[0].name + "}"

    return url[1:] if url.startswith("/") else url


def register_template_functions(env: Environment, types: Optional[TypeRegistry] = None) -> None:
    """Install the helpers into *env* as globals and filters.

    ``get_route`` is bound to *types* so templates call it with the method
    alone.
    """
    functions = {
        "camel_case": camel_case,
        "is_ignored_property": is_ignored_property,
        "get_http_verb": http_verb_label,
        "get_route": partial(derive_route, types=types),
    }
    env.globals.update(functions)
    env.filters.update(functions)
