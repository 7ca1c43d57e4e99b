"""Wrapper Generator - generates the C translation unit that gives each probe macro a callable address"""

from .types import Script, Provider, Probe


class WrapperGenerator:
    """Generates C wrapper functions around the tracing macros.

    The macros produced by the header generator expand to instrumented
    code that is only valid at its own call site, so every probe gets a
    plain C function forwarding its arguments to the macro.
    """

    def __init__(self, script: Script, header: str):
        self.script = script
        self.header = header

    def generate(self) -> str:
        lines = [
            "// AUTO-GENERATED - DO NOT EDIT",
            f"#include {self._quote(self.header)}",
            "",
        ]
        for provider in self.script.providers:
            for probe in provider.probes:
                lines.extend(self._wrapper(provider, probe))
        return "\n".join(lines)

    def _wrapper(self, provider: Provider, probe: Probe) -> list[str]:
        params = ", ".join(probe.native_params()) or "void"
        args = ", ".join(probe.argument_names())
        return [
            f"void {provider.wrapper_symbol(probe)}({params}) {{",
            f"    {provider.macro_symbol(probe)}({args});",
            "}",
            "",
        ]

    @staticmethod
    def _quote(path: str) -> str:
        escaped = str(path).replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
