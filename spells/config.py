from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Set, Union

import yaml

from .compiler import CompileOptions


@dataclass
class BuildConfig:
    """
    What to build and watch, read from a YAML file:

        pretty: true
        renderer: markdown
        write:
          - src: pages/index.spl
            dst: public/index.html
        watch:
          - "pages/*.spl"

    Paths are relative to ``base_path``.
    """

    write_pairs: Dict[Path, Path]
    watch_paths: Set[Path] = field(default_factory=set)
    options: CompileOptions = field(default_factory=CompileOptions)
    base_path: Path = Path(".")

    @property
    def files_to_watch(self) -> Set[Path]:
        return set(self.write_pairs) | self.watch_paths


def parse_config(cfg: Any, base_path: Union[str, Path] = ".") -> BuildConfig:
    """Validates an already-loaded config mapping."""
    base_path = Path(base_path)
    if not isinstance(cfg, dict):
        raise ValueError("Config must be a mapping.")

    write = cfg.get("write")
    if not isinstance(write, list) or not write:
        raise ValueError("Config needs a non-empty 'write' list of {src, dst} entries.")
    write_pairs: Dict[Path, Path] = {}
    for to_write in write:
        if not isinstance(to_write, dict) or "src" not in to_write or "dst" not in to_write:
            raise ValueError(f"Invalid 'write' entry {to_write!r}: expected 'src' and 'dst'.")
        write_pairs[base_path / to_write["src"]] = base_path / to_write["dst"]

    watch = cfg.get("watch", [])
    if not isinstance(watch, list):
        raise ValueError("'watch' must be a list of glob patterns.")
    watch_paths = {watch_path for watch_path_str in watch for watch_path in base_path.glob(watch_path_str)}

    pretty = cfg.get("pretty", False)
    if not isinstance(pretty, bool):
        raise ValueError("'pretty' must be true or false.")
    options = CompileOptions(pretty=pretty, renderer=cfg.get("renderer", "markdown"))

    return BuildConfig(write_pairs=write_pairs, watch_paths=watch_paths, options=options, base_path=base_path)


def load_config(path: Union[str, Path], base_path: Union[str, Path] = ".") -> BuildConfig:
    """Reads and validates a YAML build config."""
    with open(path, "r") as f:
        cfg = yaml.safe_load(f)
    return parse_config(cfg, base_path)
