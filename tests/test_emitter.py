"""
Unit tests for wrapper and binding emission.
"""

import ctypes
import inspect
import textwrap
from unittest import mock

import pytest
from probegen import (
    parse, emit, validate, EmitError, UnsupportedTypeError,
    WrapperGenerator, PythonGenerator,
)

FOOBAR = textwrap.dedent("""
    provider foobar {
        probe abc(char *, int);
        probe def();
    };
""")

TWO_PROVIDERS = textwrap.dedent("""
    provider foobar {
        probe abc(char *, int);
        probe my__probe(uint64_t);
    };

    provider hopla {
        probe xyz();
    };
""")


def load_bindings(source: str) -> dict:
    """Execute generated bindings without loading the native library"""
    namespace = {}
    exec(compile(source, "probes.py", "exec"), namespace)
    return namespace


class TestWrapperGenerator:
    """Test the C wrapper translation unit."""

    def test_wrapper_source(self):
        native = WrapperGenerator(parse(FOOBAR), "probes.h").generate()
        assert native == textwrap.dedent("""\
            // AUTO-GENERATED - DO NOT EDIT
            #include "probes.h"

            void foobar_probe_abc(char * arg0, int arg1) {
                FOOBAR_ABC(arg0, arg1);
            }

            void foobar_probe_def(void) {
                FOOBAR_DEF();
            }
            """)

    def test_canonical_names(self):
        native = WrapperGenerator(parse("provider Foo__Bar { probe my__probe(int); };"), "p.h").generate()
        assert "void foo_bar_probe_my_probe(int arg0) {" in native
        assert "    FOO_BAR_MY_PROBE(arg0);" in native

    def test_header_quoted(self):
        native = WrapperGenerator(parse(""), 'C:\\out\\"x".h').generate()
        assert '#include "C:\\\\out\\\\\\"x\\".h"' in native

    def test_types_verbatim(self):
        native = WrapperGenerator(parse("provider p { probe q(long long, char **); };"), "p.h").generate()
        assert "void p_probe_q(long long arg0, char ** arg1) {" in native


class TestPythonGenerator:
    """Test the ctypes binding module."""

    def test_module_compiles(self):
        source = PythonGenerator(parse(TWO_PROVIDERS), "probes").generate()
        compile(source, "probes.py", "exec")
        assert 'LIBRARY_NAME = "probes"' in source

    def test_declarations(self):
        ns = load_bindings(PythonGenerator(parse(FOOBAR), "probes").generate())
        lib = mock.MagicMock()
        assert ns["_declare"](lib) is lib
        assert lib.foobar_probe_abc.argtypes == [ctypes.POINTER(ctypes.c_char), ctypes.c_int]
        assert lib.foobar_probe_abc.restype is None
        assert lib.foobar_probe_def.argtypes == []

    def test_binding_forwards_arguments(self):
        ns = load_bindings(PythonGenerator(parse(FOOBAR), "probes").generate())
        ns["_lib"] = lib = mock.MagicMock()
        buf = ctypes.create_string_buffer(b"Gordon")
        assert ns["foobar"].abc(buf, 6) is None
        lib.foobar_probe_abc.assert_called_once_with(buf, 6)
        ns["foobar"].def_()
        lib.foobar_probe_def.assert_called_once_with()

    def test_bindings_marked_unchecked(self):
        ns = load_bindings(PythonGenerator(parse(FOOBAR), "probes").generate())
        assert ns["foobar"].abc.__unchecked__ is True

    def test_signatures(self):
        ns = load_bindings(PythonGenerator(parse(TWO_PROVIDERS), "probes").generate())
        abc = inspect.signature(ns["foobar"].abc)
        assert list(abc.parameters) == ["arg0", "arg1"]
        assert abc.parameters["arg1"].annotation is int
        assert list(inspect.signature(ns["foobar"].my_probe).parameters) == ["arg0"]
        assert list(inspect.signature(ns["hopla"].xyz).parameters) == []

    def test_library_loaded_once(self):
        ns = load_bindings(PythonGenerator(parse(FOOBAR), "probes").generate())
        lib = mock.MagicMock()
        with mock.patch.dict(ns, {"_load_library": mock.Mock(return_value=lib)}):
            ns["foobar"].def_()
            ns["foobar"].def_()
            ns["_load_library"].assert_called_once_with()
        assert lib.foobar_probe_def.call_count == 2
        assert lib.foobar_probe_abc.argtypes == [ctypes.POINTER(ctypes.c_char), ctypes.c_int]

    def test_empty_provider(self):
        ns = load_bindings(PythonGenerator(parse("provider nothing { };"), "probes").generate())
        assert inspect.isclass(ns["nothing"])


class TestEmit:
    """Test emission of both sources together."""

    def test_both_sources(self):
        sources = emit(parse(FOOBAR), header="out/probes.h", library="tracing")
        assert '#include "out/probes.h"' in sources.native
        assert 'LIBRARY_NAME = "tracing"' in sources.binding

    def test_deterministic(self):
        assert emit(parse(TWO_PROVIDERS)) == emit(parse(TWO_PROVIDERS))

    def test_order_preserved(self):
        sources = emit(parse(TWO_PROVIDERS))
        for text in sources:
            abc = text.index("foobar_probe_abc")
            my_probe = text.index("foobar_probe_my_probe")
            xyz = text.index("hopla_probe_xyz")
            assert abc < my_probe < xyz
        assert sources.binding.index("class foobar:") < sources.binding.index("class hopla:")

    def test_unsupported_type(self):
        script = parse("provider foobar { probe abc(char*, int); probe def(string); };")
        with pytest.raises(UnsupportedTypeError) as exc_info:
            emit(script)
        assert exc_info.value.spelling == "string"

    def test_colliding_probe_symbols(self):
        script = parse("provider foobar { probe my_probe(); probe my__probe(); };")
        with pytest.raises(EmitError, match="foobar_probe_my_probe"):
            emit(script)

    def test_colliding_binding_methods(self):
        """A keyword escaped with an underscore must not hide another probe."""
        script = parse("provider foo { probe def(int); probe def_(double); };")
        with pytest.raises(EmitError, match="both map to binding foo.def_"):
            emit(script)

    def test_same_method_in_different_providers(self):
        sources = emit(parse("provider a { probe x(); }; provider b { probe x(); };"))
        ns = load_bindings(sources.binding)
        ns["_lib"] = lib = mock.MagicMock()
        ns["a"].x()
        ns["b"].x()
        lib.a_probe_x.assert_called_once_with()
        lib.b_probe_x.assert_called_once_with()

    @pytest.mark.parametrize("source", [
        "provider foo { probe a___b(); };",
        "provider foo____bar { probe a(); };",
    ])
    def test_long_underscore_runs(self, source):
        with pytest.raises(EmitError, match="three or more underscores"):
            validate(parse(source))

    def test_colliding_providers(self):
        script = parse("provider Foo { probe a(); }; provider foo { probe b(); };")
        with pytest.raises(EmitError, match="namespace 'foo'"):
            emit(script)

    @pytest.mark.parametrize("source", [
        "provider foo-bar { probe a(); };",
        "provider 1st { probe a(); };",
        "provider foo { probe a-b(); };",
    ])
    def test_invalid_identifiers(self, source):
        with pytest.raises(EmitError, match="not a valid identifier"):
            validate(parse(source))

    def test_reserved_provider(self):
        with pytest.raises(EmitError, match="reserved"):
            validate(parse("provider ctypes { probe a(); };"))

    def test_keyword_names(self):
        sources = emit(parse("provider class { probe def(int); };"))
        assert "void class_probe_def(int arg0) {" in sources.native
        ns = load_bindings(sources.binding)
        ns["_lib"] = lib = mock.MagicMock()
        ns["class_"].def_(3)
        lib.class_probe_def.assert_called_once_with(3)
