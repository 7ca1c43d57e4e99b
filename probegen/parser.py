"""Provider definition parser.

Only ``provider`` blocks are recognised. The scanner searches forward for
the next ``provider`` keyword, parses exactly one block from there and
repeats; the text in between (comments, pragmas, probe clauses of a full
tracing script) is skipped without being validated. This is a subset
parser, not an implementation of the tracing language grammar.
"""

import re
from .types import Probe, Provider, Script
from .errors import ParseError

_WS = re.compile(r'[ \t\r\n]*')
_NAME = re.compile(r'[A-Za-z0-9_-]+')
# ``provider`` must not continue a longer identifier such as ``myprovider``
_PROVIDER_KEYWORD = re.compile(r'(?<![A-Za-z0-9_-])provider')
# An argument list never spans a declaration terminator or a block brace
_ARGUMENTS = re.compile(r'[^);{}]*')


class ProviderParser:
    """Parses provider/probe declarations out of provider definition text"""

    def __init__(self, content: str):
        self.content = content
        self.pos = 0

    def parse(self) -> Script:
        providers = []
        self.pos = 0
        while m := _PROVIDER_KEYWORD.search(self.content, self.pos):
            self.pos = m.start()
            providers.append(self._parse_provider())
        return Script(providers=tuple(providers))

    def parse_probe(self) -> Probe:
        """Parse text holding a single probe declaration"""
        self.pos = 0
        probe = self._parse_probe()
        self._skip_ws()
        if self.pos != len(self.content):
            raise self._error("unexpected text after probe declaration")
        return probe

    def _parse_provider(self) -> Provider:
        self._expect('provider')
        name = self._parse_name('provider')
        self._expect('{')

        probes = []
        while True:
            self._skip_ws()
            if self.content.startswith('}', self.pos):
                break
            if not self.content.startswith('probe', self.pos):
                raise self._error(f"expected 'probe' or '}}' in provider {name!r}")
            probes.append(self._parse_probe())

        self._expect('}')
        self._expect(';')
        return Provider(name=name, probes=tuple(probes))

    def _parse_probe(self) -> Probe:
        self._expect('probe')
        name = self._parse_name('probe')
        self._expect('(')
        open_paren = self.pos - 1

        m = _ARGUMENTS.match(self.content, self.pos)
        if not self.content.startswith(')', m.end()):
            raise self._error(f"unterminated argument list of probe {name!r}", open_paren)

        # Types are opaque here; empty entries (``()``, trailing commas) are dropped
        arguments = tuple(a for a in (p.strip() for p in m.group().split(',')) if a)
        self.pos = m.end()

        self._expect(')')
        self._expect(';')
        return Probe(name=name, arguments=arguments)

    def _parse_name(self, kind: str) -> str:
        self._skip_ws()
        m = _NAME.match(self.content, self.pos)
        if not m:
            raise self._error(f"expected {kind} name")
        self.pos = m.end()
        return m.group()

    def _expect(self, token: str):
        self._skip_ws()
        if not self.content.startswith(token, self.pos):
            raise self._error(f"expected {token!r}")
        self.pos += len(token)

    def _skip_ws(self):
        self.pos = _WS.match(self.content, self.pos).end()

    def _error(self, message: str, offset: int = None) -> ParseError:
        return ParseError(message, self.content, self.pos if offset is None else offset)


def parse(text: str) -> Script:
    """Parse provider definition text into a ``Script``"""
    return ProviderParser(text).parse()


def parse_probe(text: str) -> Probe:
    """Parse a standalone ``probe name(types);`` declaration"""
    return ProviderParser(text).parse_probe()
