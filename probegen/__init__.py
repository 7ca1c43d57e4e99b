"""
Probe Binding Generator Package

Parses provider definitions (the provider/probe subset of the D tracing
language) and generates:
  1. C wrapper functions around the tracing macros of the header generator
  2. Python bindings using ctypes, one namespace per provider
"""

from .types import Names, Probe, Provider, Script
from .errors import ProbegenError, ParseError, EmitError, UnsupportedTypeError, ToolError
from .parser import ProviderParser, parse, parse_probe
from .type_mapper import TypeMapper, ForeignType
from .wrapper_generator import WrapperGenerator
from .python_generator import PythonGenerator
from .emitter import EmittedSources, emit, validate
from .builder import Builder, BuilderConfig, BuildResult

__all__ = [
    'Names', 'Probe', 'Provider', 'Script',
    'ProbegenError', 'ParseError', 'EmitError', 'UnsupportedTypeError', 'ToolError',
    'ProviderParser', 'parse', 'parse_probe',
    'TypeMapper', 'ForeignType',
    'WrapperGenerator', 'PythonGenerator',
    'EmittedSources', 'emit', 'validate',
    'Builder', 'BuilderConfig', 'BuildResult',
]
