"""Data types for provider definitions"""

import re
from dataclasses import dataclass, field

_DOUBLED_SEPARATOR = re.compile(r'_{2,}')


class Names:
    """Naming policy shared by every named entity.

    The derived names must match what the header generator produces
    from the same source name, so all of them go through ``safe_name``.
    For runs of three or more underscores the two disagree; emission
    rejects such names.
    """

    name: str

    @property
    def safe_name(self) -> str:
        return _DOUBLED_SEPARATOR.sub('_', self.name)

    @property
    def macro_name(self) -> str:
        return self.safe_name.upper()

    @property
    def native_symbol_name(self) -> str:
        return self.safe_name.lower()

    @property
    def binding_name(self) -> str:
        return self.safe_name.lower()


@dataclass(frozen=True)
class Probe(Names):
    """Probe declaration"""
    name: str
    arguments: tuple[str, ...] = ()

    def argument_names(self) -> list[str]:
        return [f"arg{i}" for i in range(len(self.arguments))]

    def native_params(self) -> list[str]:
        """Parameter declarations for native code, types as written"""
        return [f"{ty} {name}" for ty, name in zip(self.arguments, self.argument_names())]


@dataclass(frozen=True)
class Provider(Names):
    """Provider block"""
    name: str
    probes: tuple[Probe, ...] = ()

    def wrapper_symbol(self, probe: Probe) -> str:
        return f"{self.native_symbol_name}_probe_{probe.native_symbol_name}"

    def macro_symbol(self, probe: Probe) -> str:
        return f"{self.macro_name}_{probe.macro_name}"


@dataclass(frozen=True)
class Script:
    """Complete parse result, providers in declaration order"""
    providers: tuple[Provider, ...] = field(default_factory=tuple)

    def probes(self):
        """Iterate ``(provider, probe)`` pairs in declaration order"""
        for provider in self.providers:
            for probe in provider.probes:
                yield provider, probe
