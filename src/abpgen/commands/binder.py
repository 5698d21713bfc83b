"""Map an options model to a Typer command.

:func:`bind_options` reads the :class:`~abpgen.commands.options.CliOption`
and :class:`~abpgen.commands.options.CliArgument` markers of every field and
turns each marked field into a descriptor dict:

* ``CliArgument`` fields become positional :func:`typer.Argument` values,
  always required.
* ``CliOption`` fields become :func:`typer.Option` flags under every alias
  the marker declares. Required options use ``...``; optional ones take the
  field's default. Boolean options are plain flags.
* A field marked with both is treated as an option.
* Fields with neither marker are skipped.

:func:`build_command_function` then compiles a real function whose
signature lists the descriptors (arguments first), because Typer reads the
command surface through :func:`inspect.signature`. The function also takes
Typer's context, so the root command's ``obj`` reaches the dispatcher
without a global context lookup.
"""

from __future__ import annotations

import re
from typing import Any, Callable, List, Optional

import typer

from abpgen.commands.options import CliArgument, CliOption, CommandOptions
from abpgen.exceptions import ConfigError


def _find_marker(metadata: list[Any], marker_type: type) -> Any:
    for item in metadata:
        if isinstance(item, marker_type):
            return item
    return None


def _is_list(annotation: Any) -> bool:
    return getattr(annotation, "__origin__", None) is list or annotation is list


def bind_options(options_type: type[CommandOptions]) -> list[dict[str, Any]]:
    """Build Typer descriptors for every marked field of *options_type*.

    Returns:
        Descriptor dicts in field order, each with the keys ``name``
        (Python parameter name), ``type`` (annotation), ``default`` (the
        Typer ``Option``/``Argument``), ``help``, ``is_argument`` and
        ``aliases``.

    Raises:
        ConfigError: If an option declares no alias, an argument has no
            name, or two fields claim the same alias or argument name.
    """
    descriptors: list[dict[str, Any]] = []
    seen_aliases: dict[str, str] = {}
    seen_arguments: dict[str, str] = {}

    for field_name, field in options_type.model_fields.items():
        option = _find_marker(field.metadata, CliOption)
        argument = _find_marker(field.metadata, CliArgument)

        if option is not None:
            aliases = option.aliases
            if not aliases:
                raise ConfigError(
                    f"{options_type.__name__}.{field_name}: an option needs a name or short name"
                )
            for alias in aliases:
                if alias in seen_aliases:
                    raise ConfigError(
                        f"{options_type.__name__}: option '{alias}' is declared by both "
                        f"'{seen_aliases[alias]}' and '{field_name}'"
                    )
                seen_aliases[alias] = field_name

            py_type: Any = field.annotation
            if _is_list(py_type):
                # Typer collects repeated options into a list; None means "not given".
                py_type = Optional[List[str]]
                fallback = None
            else:
                fallback = field.get_default(call_default_factory=True)

            if option.required:
                default = typer.Option(..., *aliases, help=option.description or None)
            else:
                default = typer.Option(fallback, *aliases, help=option.description or None)

            descriptors.append({
                "name": field_name,
                "type": py_type,
                "default": default,
                "help": option.description,
                "is_argument": False,
                "aliases": aliases,
            })

        elif argument is not None:
            if not argument.name:
                raise ConfigError(f"{options_type.__name__}.{field_name}: an argument needs a name")
            if argument.name in seen_arguments:
                raise ConfigError(
                    f"{options_type.__name__}: argument '{argument.name}' is declared by both "
                    f"'{seen_arguments[argument.name]}' and '{field_name}'"
                )
            seen_arguments[argument.name] = field_name

            descriptors.append({
                "name": field_name,
                "type": field.annotation,
                "default": typer.Argument(
                    ...,
                    metavar=argument.name.upper(),
                    help=argument.description or None,
                ),
                "help": argument.description,
                "is_argument": True,
                "aliases": (argument.name,),
            })

    return descriptors


def build_command_function(
    descriptors: list[dict[str, Any]],
    dispatch: Callable[[dict[str, Any], Any], Any],
    func_name: str,
    doc: Optional[str] = None,
) -> Callable[..., Any]:
    """Compile a Typer-compatible function for *descriptors*.

    The generated function collects its arguments into a dict keyed by
    field name, drops values that were not given (``None``), and passes the
    dict to *dispatch* together with the root context's ``obj``.
    """
    func_name = re.sub(r"\W", "_", func_name)
    arguments = [d for d in descriptors if d["is_argument"]]
    options = [d for d in descriptors if not d["is_argument"]]

    namespace: dict[str, Any] = {"_ctx_ann": typer.Context}
    sig_parts: list[str] = ["ctx: _ctx_ann"]
    for prefix, group in (("arg", arguments), ("opt", options)):
        for idx, desc in enumerate(group):
            sentinel = f"_default_{prefix}_{idx}"
            ann = f"_ann_{prefix}_{idx}"
            namespace[sentinel] = desc["default"]
            namespace[ann] = desc["type"]
            sig_parts.append(f"{desc['name']}: {ann} = {sentinel}")

    body_lines = ["    values = {}"]
    for desc in descriptors:
        py_name = desc["name"]
        body_lines.append(f"    if {py_name} is not None: values[{py_name!r}] = {py_name}")
    body_lines.append("    return _dispatch(values, ctx.find_root().obj)")

    source = f"def {func_name}({', '.join(sig_parts)}):\n" + "\n".join(body_lines) + "\n"
    namespace["_dispatch"] = dispatch

    code = compile(source, f"<abpgen:{func_name}>", "exec")
    exec(code, namespace)  # noqa: S102 -- controlled code generation
    fn = namespace[func_name]
    fn.__doc__ = doc
    fn.__name__ = func_name
    fn.__qualname__ = func_name
    return fn
