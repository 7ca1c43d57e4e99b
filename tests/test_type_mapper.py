"""
Unit tests for native type to ctypes mapping.
"""

import ctypes

import pytest
from probegen import TypeMapper, ForeignType, UnsupportedTypeError, EmitError


class TestMapType:
    """Test the closed type table."""

    @pytest.mark.parametrize("spelling, base", [
        ("char", "c_char"),
        ("short", "c_short"),
        ("int", "c_int"),
        ("long", "c_long"),
        ("long long", "c_longlong"),
        ("int8_t", "c_int8"),
        ("int16_t", "c_int16"),
        ("int32_t", "c_int32"),
        ("int64_t", "c_int64"),
        ("intptr_t", "c_ssize_t"),
        ("uint8_t", "c_uint8"),
        ("uint16_t", "c_uint16"),
        ("uint32_t", "c_uint32"),
        ("uint64_t", "c_uint64"),
        ("uintptr_t", "c_size_t"),
        ("float", "c_float"),
        ("double", "c_double"),
    ])
    def test_scalars(self, spelling, base):
        mapped = TypeMapper.map_type(spelling)
        assert mapped == ForeignType(base=base, pointer_depth=0)
        assert hasattr(ctypes, mapped.base)

    def test_pointer(self):
        assert TypeMapper.map_type("char *") == ForeignType("c_char", 1)
        assert TypeMapper.map_type("char*") == ForeignType("c_char", 1)

    def test_pointer_to_pointer(self):
        assert TypeMapper.map_type("char **") == ForeignType("c_char", 2)
        assert TypeMapper.map_type("char * *") == ForeignType("c_char", 2)

    def test_whitespace_normalized(self):
        assert TypeMapper.map_type("  long   long * ") == ForeignType("c_longlong", 1)

    @pytest.mark.parametrize("spelling", ["string", "unsigned int", "void", "struct foo *", "*", "bool"])
    def test_unsupported(self, spelling):
        with pytest.raises(UnsupportedTypeError) as exc_info:
            TypeMapper.map_type(spelling)
        assert exc_info.value.spelling == spelling
        assert isinstance(exc_info.value, EmitError)

    def test_is_supported(self):
        assert TypeMapper.is_supported("uint32_t *")
        assert not TypeMapper.is_supported("string")


class TestForeignType:
    """Test rendering of mapped types."""

    def test_render_scalar(self):
        assert ForeignType("c_int").render() == "ctypes.c_int"

    def test_render_nested_pointers(self):
        assert ForeignType("c_char", 2).render() == "ctypes.POINTER(ctypes.POINTER(ctypes.c_char))"

    def test_rendered_expression_is_ctypes_type(self):
        rendered = TypeMapper.map_type("char **").render()
        assert eval(rendered, {"ctypes": ctypes}) is ctypes.POINTER(ctypes.POINTER(ctypes.c_char))

    @pytest.mark.parametrize("spelling, hint", [
        ("int", "int"),
        ("uint64_t", "int"),
        ("double", "float"),
        ("float", "float"),
        ("char", "bytes"),
        ("char *", "object"),
        ("int **", "object"),
    ])
    def test_python_type(self, spelling, hint):
        assert TypeMapper.map_type(spelling).python_type == hint
