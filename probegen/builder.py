"""Builder - drives the header generator and the C compiler around the emitted sources"""

import logging
import os
import platform
import subprocess
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .types import Script
from .parser import parse
from .emitter import emit
from .errors import ToolError

logger = logging.getLogger(__name__)

# Machine names the header generator spells differently
DTRACE_ARCHES = {
    'aarch64': 'arm64',
}


def library_filename(name: str) -> str:
    """File name of the shared wrapper library for ``name``"""
    if sys.platform == 'darwin':
        return f"lib{name}.dylib"
    return f"lib{name}.so"


def dtrace_arch(machine: str) -> str:
    return DTRACE_ARCHES.get(machine, machine)


@dataclass
class BuilderConfig:
    """Settings for one build"""
    out_dir: Path
    name: str = "probes"
    dtrace: str = "dtrace"
    cc: str = field(default_factory=lambda: os.environ.get("CC", "cc"))
    cflags: list[str] = field(default_factory=list)
    arch: Optional[str] = None
    keep_h_file: bool = False
    keep_c_file: bool = False
    # Variable through which callers learn where the bindings were written
    binding_env_var: Optional[str] = None


@dataclass
class BuildResult:
    """Files left in the output directory by a build"""
    binding_file: Path
    library_file: Path
    header_file: Optional[Path] = None
    c_file: Optional[Path] = None
    env_var: Optional[str] = None

    def env(self) -> dict[str, str]:
        """Variables telling the caller where the bindings were written"""
        if not self.env_var:
            return {}
        return {self.env_var: str(self.binding_file)}


class Builder:
    """Builds a probe wrapper library and its Python bindings from provider files.

    Usage:
        result = Builder(BuilderConfig(out_dir="build")).file("hello.d").compile()
    """

    def __init__(self, config: BuilderConfig):
        self.config = config
        self.d_files: list[Path] = []

    def file(self, path) -> "Builder":
        self.d_files.append(Path(path))
        return self

    def files(self, paths: Iterable) -> "Builder":
        for path in paths:
            self.file(path)
        return self

    def read_sources(self) -> tuple[str, Script]:
        """Concatenated text of all provider files and their providers in order.

        The header generator re-parses the full text itself, so it gets
        everything, not just the provider blocks.
        """
        contents = []
        providers = []
        for d_file in self.d_files:
            content = d_file.read_text()
            contents.append(content)
            providers.extend(parse(content).providers)
        return "\n".join(contents), Script(providers=tuple(providers))

    def compile(self) -> BuildResult:
        cfg = self.config
        out_dir = Path(cfg.out_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        contents, script = self.read_sources()

        h_file = self._temp_path(out_dir, f"{cfg.name}-", ".h")
        c_file = self._temp_path(out_dir, f"{cfg.name}-ffi-", ".c")
        succeeded = False
        try:
            sources = emit(script, header=str(h_file), library=cfg.name)

            self._generate_header(contents, h_file, out_dir)

            c_file.write_text(sources.native)
            library_file = out_dir / library_filename(cfg.name)
            self._compile_library(c_file, library_file)

            binding_file = out_dir / f"{cfg.name}.py"
            binding_file.write_text(sources.binding)
            logger.info("Wrote bindings for %d provider(s) to %s", len(script.providers), binding_file)
            succeeded = True
        finally:
            if not (cfg.keep_h_file and succeeded):
                h_file.unlink(missing_ok=True)
            if not (cfg.keep_c_file and succeeded):
                c_file.unlink(missing_ok=True)

        return BuildResult(
            binding_file=binding_file,
            library_file=library_file,
            header_file=h_file if cfg.keep_h_file else None,
            c_file=c_file if cfg.keep_c_file else None,
            env_var=cfg.binding_env_var,
        )

    def _generate_header(self, contents: str, h_file: Path, out_dir: Path):
        d_file = self._temp_path(out_dir, f"{self.config.name}-", ".d")
        try:
            d_file.write_text(contents)
            command = [self.config.dtrace]
            arch = self._arch()
            if arch:
                command += ["-arch", arch]
            command += ["-o", str(h_file), "-h", "-s", str(d_file)]
            self._run(command)
        finally:
            d_file.unlink(missing_ok=True)

    def _compile_library(self, c_file: Path, library_file: Path):
        command = [self.config.cc, "-shared", "-fPIC", *self.config.cflags,
                   "-o", str(library_file), str(c_file)]
        self._run(command)

    def _arch(self) -> Optional[str]:
        if self.config.arch:
            return self.config.arch
        # Only the macOS header generator takes -arch
        if sys.platform == 'darwin':
            return dtrace_arch(platform.machine())
        return None

    @staticmethod
    def _temp_path(directory: Path, prefix: str, suffix: str) -> Path:
        fd, path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
        os.close(fd)
        return Path(path)

    @staticmethod
    def _run(command: list[str]):
        logger.debug("Running %s", " ".join(command))
        try:
            proc = subprocess.run(command, capture_output=True, text=True)
        except FileNotFoundError:
            raise ToolError(command, 127, f"{command[0]}: command not found") from None
        if proc.returncode != 0:
            raise ToolError(command, proc.returncode, proc.stderr or proc.stdout)
