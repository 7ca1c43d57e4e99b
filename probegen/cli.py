"""
Probe binding generator command line.

Parses provider definition files and generates:
  1. C wrapper source giving every probe macro a callable function
  2. Python bindings using ctypes

With --build, also runs the header generator and the C compiler to
produce the shared library the bindings load.

Usage:
    probegen hello.d --output-dir generated/
    probegen providerA.d providerB.d -o generated/ --name tracing --build
"""

import argparse
import logging
import re
import sys
import time
from pathlib import Path

from .parser import parse
from .types import Script
from .emitter import emit, IDENTIFIER
from .builder import Builder, BuilderConfig
from .errors import ProbegenError, ParseError

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="probegen", description="Generate probe bindings from provider definitions")
    parser.add_argument("d_files", nargs="+", help="Provider definition (.d) files")
    parser.add_argument("--output-dir", "-o", default="generated", help="Output directory")
    parser.add_argument("--name", "-n", default="", help="Name of the generated module and library")
    parser.add_argument("--header", default="", help="Header produced by the header generator (without --build)")
    parser.add_argument("--build", action="store_true", help="Run dtrace and the C compiler as well")
    parser.add_argument("--dtrace", default="dtrace", help="Header generator executable")
    parser.add_argument("--cc", default="", help="C compiler (defaults to $CC or cc)")
    parser.add_argument("--cflags", default="", help="Extra C compiler flags")
    parser.add_argument("--arch", default="", help="Architecture passed to the header generator")
    parser.add_argument("--keep-h-file", action="store_true", help="Keep the generated header")
    parser.add_argument("--keep-c-file", action="store_true", help="Keep the generated C wrapper")
    parser.add_argument("--env-var", default="", help="Report the bindings path as VAR=path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log tool invocations")
    return parser


def default_name(d_file: Path) -> str:
    """Module name derived from the first provider file, e.g. my.probes.d -> my_probes"""
    name = re.sub(r'[^A-Za-z0-9_]', '_', d_file.stem)
    if not IDENTIFIER.match(name):
        name = f"_{name}"
    return name


def generate(d_files: list[Path], output_dir: Path, name: str, header: str) -> list[Path]:
    """Write the C wrapper and the Python bindings without running any tool"""
    providers = []
    for d_file in d_files:
        script = parse(d_file.read_text())
        logger.debug("Parsed %s: %d provider(s)", d_file, len(script.providers))
        providers.extend(script.providers)
    sources = emit(Script(providers=tuple(providers)), header=header, library=name)

    output_dir.mkdir(parents=True, exist_ok=True)
    files = {
        output_dir / f"{name}-ffi.c": sources.native,
        output_dir / f"{name}.py": sources.binding,
    }
    for path, content in files.items():
        path.write_text(content)
    return list(files)


def main(argv=None) -> int:
    start_time = time.perf_counter()

    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    d_files = [Path(f) for f in args.d_files]
    output_dir = Path(args.output_dir)
    name = args.name or default_name(d_files[0])
    if not IDENTIFIER.match(name):
        print(f"error: --name {name!r} is not a valid Python module name", file=sys.stderr)
        return 1

    try:
        if args.build:
            config = BuilderConfig(
                out_dir=output_dir,
                name=name,
                dtrace=args.dtrace,
                cflags=args.cflags.split(),
                arch=args.arch or None,
                keep_h_file=args.keep_h_file,
                keep_c_file=args.keep_c_file,
                binding_env_var=args.env_var or None,
            )
            if args.cc:
                config.cc = args.cc
            result = Builder(config).files(d_files).compile()
            generated = [p for p in (result.header_file, result.c_file, result.library_file, result.binding_file) if p]
            env = result.env()
        else:
            generated = generate(d_files, output_dir, name, args.header or f"{name}.h")
            env = {args.env_var: str(generated[-1])} if args.env_var else {}
    except ParseError as e:
        print(f"error: {e.format()}", file=sys.stderr)
        return 1
    except (ProbegenError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for path in generated:
        print(f"Generated: {path}")

    for var, value in env.items():
        print(f"{var}={value}")

    elapsed = time.perf_counter() - start_time
    print(f"Generation completed in {elapsed*1000:.2f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
