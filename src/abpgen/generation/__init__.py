"""C# source discovery, parsing and template rendering for ABP solutions.

Sub-modules:

* :mod:`~abpgen.generation.conventions` -- ABP verb and primitive-type conventions.
* :mod:`~abpgen.generation.functions` -- naming and route helpers for templates.
* :mod:`~abpgen.generation.file_finder` -- gitignore-style file search.
* :mod:`~abpgen.generation.project` -- solution layout discovery.
* :mod:`~abpgen.generation.source_parser` -- regex C# parser and type registry.
* :mod:`~abpgen.generation.renderer` -- Jinja2 template groups.
* :mod:`~abpgen.generation.writer` -- writing generated files.
* :mod:`~abpgen.generation.stages` -- pipeline stages wrapping all of the above.
"""
