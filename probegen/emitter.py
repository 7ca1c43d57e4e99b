"""Emission of the wrapper and binding sources for a parsed script"""

import re
from typing import NamedTuple
from .types import Script
from .errors import EmitError
from .type_mapper import TypeMapper
from .wrapper_generator import WrapperGenerator
from .python_generator import PythonGenerator, RESERVED_NAMES, binding_identifier

IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*\Z')


class EmittedSources(NamedTuple):
    native: str
    binding: str


def validate(script: Script):
    """Reject scripts whose generated symbols would be invalid or collide.

    Raises EmitError for names that are not identifiers once canonicalized,
    for names with runs of three or more underscores, for two probes
    sharing a wrapper symbol or a binding method, and for two providers
    sharing a binding namespace. Unsupported argument types raise
    UnsupportedTypeError.
    """
    namespaces = {}
    symbols = {}

    for provider in script.providers:
        if not IDENTIFIER.match(provider.safe_name):
            raise EmitError(f"provider name {provider.name!r} is not a valid identifier")
        _check_underscores(provider.name)

        namespace = binding_identifier(provider.binding_name)
        if namespace in RESERVED_NAMES:
            raise EmitError(f"provider name {provider.name!r} is reserved in generated bindings")
        if namespace in namespaces:
            raise EmitError(
                f"providers {namespaces[namespace]!r} and {provider.name!r} "
                f"both map to namespace {namespace!r}"
            )
        namespaces[namespace] = provider.name
        methods = {}

        for probe in provider.probes:
            if not IDENTIFIER.match(probe.safe_name):
                raise EmitError(
                    f"probe name {probe.name!r} of provider {provider.name!r} is not a valid identifier"
                )
            _check_underscores(probe.name)

            symbol = provider.wrapper_symbol(probe)
            label = f"{provider.name}.{probe.name}"
            if symbol in symbols:
                raise EmitError(
                    f"probes {symbols[symbol]!r} and {label!r} both map to symbol {symbol!r}"
                )
            symbols[symbol] = label

            method = binding_identifier(probe.binding_name)
            if method in methods:
                raise EmitError(
                    f"probes {methods[method]!r} and {label!r} both map to binding {namespace}.{method}"
                )
            methods[method] = label

            for spelling in probe.arguments:
                TypeMapper.map_type(spelling)


def _check_underscores(name: str):
    # The header generator does not collapse such runs the way safe_name does
    if "___" in name:
        raise EmitError(f"name {name!r} has a run of three or more underscores")


def emit(script: Script, header: str = "probes.h", library: str = "probes") -> EmittedSources:
    """Generate the native wrapper source and the Python binding source.

    ``header`` is the header produced by the header generator, included by
    the wrapper source. ``library`` is the stem of the shared library the
    bindings load.
    """
    validate(script)
    return EmittedSources(
        native=WrapperGenerator(script, header).generate(),
        binding=PythonGenerator(script, library).generate(),
    )
