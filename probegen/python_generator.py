"""Python Generator - generates Python bindings using ctypes for the probe wrapper library"""

import keyword
from .types import Script, Provider, Probe
from .type_mapper import TypeMapper

# Module-level names of the generated bindings a provider must not shadow
RESERVED_NAMES = frozenset({
    'ctypes', 'os', 'sys', 'LIBRARY_NAME',
    '_lib', '_library', '_load_library', '_declare', '_unchecked',
})


def binding_identifier(name: str) -> str:
    """Python identifier for a binding name, keywords get a trailing underscore"""
    return f"{name}_" if keyword.iskeyword(name) else name


class PythonGenerator:
    """Generates Python bindings using ctypes"""

    def __init__(self, script: Script, library: str):
        self.script = script
        self.library = library

    def generate(self) -> str:
        """Generate complete Python module"""
        lines = [
            '"""',
            f"AUTO-GENERATED Python bindings for the {self.library} probes",
            "DO NOT EDIT - Generated from provider definitions",
            '"""',
            "",
            "import ctypes",
            "import os",
            "import sys",
            "",
            "",
            "# ══════════════════════════════════════════════════════════════",
            "# Library Loading",
            "# ══════════════════════════════════════════════════════════════",
            "",
            f'LIBRARY_NAME = "{self.library}"',
            "",
            "",
            "def _load_library():",
            '    """Load the native probe wrapper library"""',
            "    if sys.platform == 'darwin':",
            '        lib_name = f"lib{LIBRARY_NAME}.dylib"',
            "    else:",
            '        lib_name = f"lib{LIBRARY_NAME}.so"',
            "",
            "    this_dir = os.path.dirname(os.path.abspath(__file__))",
            "    lib_path = os.path.join(this_dir, lib_name)",
            "    if os.path.exists(lib_path):",
            "        return ctypes.CDLL(lib_path)",
            "",
            "    # Try system library path",
            "    return ctypes.CDLL(lib_name)",
            "",
            "",
            "_lib = None",
            "",
            "",
            "def _library():",
            "    global _lib",
            "    if _lib is None:",
            "        _lib = _declare(_load_library())",
            "    return _lib",
            "",
            "",
            "def _unchecked(func):",
            '    """Mark a binding whose call into native code cannot be checked by Python"""',
            "    func.__unchecked__ = True",
            "    return func",
            "",
            "",
        ]

        lines.extend(self._generate_function_decls())

        for provider in self.script.providers:
            lines.extend(self._generate_provider(provider))

        return "\n".join(lines)

    def _generate_function_decls(self) -> list[str]:
        """Generate ctypes function declarations"""
        lines = [
            "# ══════════════════════════════════════════════════════════════",
            "# C Wrapper Function Declarations",
            "# ══════════════════════════════════════════════════════════════",
            "",
            "def _declare(lib):",
        ]

        for provider, probe in self.script.probes():
            func_name = provider.wrapper_symbol(probe)
            param_types = [TypeMapper.map_type(a).render() for a in probe.arguments]
            lines.append(f"    lib.{func_name}.restype = None")
            lines.append(f"    lib.{func_name}.argtypes = [{', '.join(param_types)}]")

        lines.append("    return lib")
        lines.append("")
        lines.append("")
        return lines

    def _generate_provider(self, provider: Provider) -> list[str]:
        """Generate the namespace class of one provider"""
        lines = [
            "# ══════════════════════════════════════════════════════════════",
            f"# {provider.name} Provider",
            "# ══════════════════════════════════════════════════════════════",
            "",
            f"class {binding_identifier(provider.binding_name)}:",
            f'    """Probes for the `{provider.name}` provider"""',
            "",
        ]

        for probe in provider.probes:
            lines.extend(self._generate_probe(provider, probe))

        lines.append("")
        return lines

    def _generate_probe(self, provider: Provider, probe: Probe) -> list[str]:
        """Generate the static method firing one probe"""
        params = []
        for name, spelling in zip(probe.argument_names(), probe.arguments):
            params.append(f"{name}: {TypeMapper.map_type(spelling).python_type}")

        args = ", ".join(probe.argument_names())
        return [
            "    @staticmethod",
            "    @_unchecked",
            f"    def {binding_identifier(probe.binding_name)}({', '.join(params)}) -> None:",
            f'        """Fire the `{probe.name}` probe of the `{provider.name}` provider"""',
            f"        _library().{provider.wrapper_symbol(probe)}({args})",
            "",
        ]
