"""Type mapping from native probe argument spellings to ctypes types"""

from dataclasses import dataclass
from .errors import UnsupportedTypeError


@dataclass(frozen=True)
class ForeignType:
    """ctypes type of one probe argument"""
    base: str
    pointer_depth: int = 0

    def render(self, module: str = "ctypes") -> str:
        """Render as a ctypes expression, one POINTER() per pointer level"""
        rendered = f"{module}.{self.base}"
        for _ in range(self.pointer_depth):
            rendered = f"{module}.POINTER({rendered})"
        return rendered

    @property
    def python_type(self) -> str:
        """Python type hint for the binding signature"""
        if self.pointer_depth:
            return 'object'
        return TypeMapper.PYTHON_TYPES.get(self.base, 'int')


class TypeMapper:
    """Maps native scalar and pointer spellings to ctypes types"""

    # Closed table: anything else is rejected, never guessed
    CTYPES = {
        'char': 'c_char',
        'short': 'c_short',
        'int': 'c_int',
        'long': 'c_long',
        'long long': 'c_longlong',
        'int8_t': 'c_int8',
        'int16_t': 'c_int16',
        'int32_t': 'c_int32',
        'int64_t': 'c_int64',
        'intptr_t': 'c_ssize_t',
        'uint8_t': 'c_uint8',
        'uint16_t': 'c_uint16',
        'uint32_t': 'c_uint32',
        'uint64_t': 'c_uint64',
        'uintptr_t': 'c_size_t',
        'float': 'c_float',
        'double': 'c_double',
    }

    PYTHON_TYPES = {
        'c_char': 'bytes',
        'c_float': 'float',
        'c_double': 'float',
    }

    @classmethod
    def split_pointer(cls, spelling: str) -> tuple[str, int]:
        """Split ``"char **"`` into ``("char", 2)``"""
        base = spelling.strip()
        depth = 0
        while base.endswith('*'):
            depth += 1
            base = base[:-1].rstrip()
        return " ".join(base.split()), depth

    @classmethod
    def map_type(cls, spelling: str) -> ForeignType:
        """Convert a native type spelling to its ctypes type"""
        base, depth = cls.split_pointer(spelling)
        if base not in cls.CTYPES:
            raise UnsupportedTypeError(spelling)
        return ForeignType(base=cls.CTYPES[base], pointer_depth=depth)

    @classmethod
    def is_supported(cls, spelling: str) -> bool:
        return cls.split_pointer(spelling)[0] in cls.CTYPES
