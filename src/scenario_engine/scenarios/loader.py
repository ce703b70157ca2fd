"""Python scenario file discovery and loading."""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import sys
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .models import ScenarioDefinition

logger = logging.getLogger(__name__)

DEFAULT_INCLUDES = ["**/*_scenario.py"]
DEFAULT_EXCLUDES = [".git", ".venv", "venv", "__pycache__", "node_modules", "build", "dist"]


class ScenarioLoader:
    """Finds scenario files and imports the definitions they expose."""

    def __init__(self,
                 includes: Optional[Sequence[str]] = None,
                 excludes: Optional[Sequence[str]] = None):
        """Initialize scenario loader with default glob patterns."""
        self.includes = list(includes) if includes else list(DEFAULT_INCLUDES)
        self.excludes = list(excludes) if excludes is not None else list(DEFAULT_EXCLUDES)

    def discover(self,
                 paths: Iterable[Path],
                 includes: Optional[Sequence[str]] = None,
                 excludes: Optional[Sequence[str]] = None) -> List[Path]:
        """
        Resolve paths to scenario files.

        Files are taken as given. Directories are searched with the include
        globs; any file whose relative path has a component matching an
        exclude pattern is dropped.
        """
        includes = list(includes) if includes else self.includes
        excludes = list(excludes) if excludes is not None else self.excludes

        found: List[Path] = []
        for path in paths:
            path = Path(path)
            if not path.exists():
                raise FileNotFoundError(f"Scenario path not found: {path}")

            if path.is_file():
                found.append(path.resolve())
                continue

            for pattern in includes:
                for candidate in path.glob(pattern):
                    if not candidate.is_file():
                        continue
                    relative = candidate.relative_to(path)
                    if self._is_excluded(relative, excludes):
                        continue
                    found.append(candidate.resolve())

        files = sorted(set(found))
        logger.debug(f"Discovered {len(files)} scenario files")
        return files

    @staticmethod
    def _is_excluded(relative: Path, excludes: Sequence[str]) -> bool:
        for pattern in excludes:
            if fnmatch(relative.as_posix(), pattern):
                return True
            if any(fnmatch(part, pattern) for part in relative.parts[:-1]):
                return True
        return False

    def load_file(self, path: Path) -> List[ScenarioDefinition]:
        """Import a scenario file and collect its definitions."""
        path = Path(path)
        logger.info(f"Loading scenarios from: {path}")

        if not path.exists():
            raise FileNotFoundError(f"Scenario file not found: {path}")

        digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:8]
        module_name = f"_scenario_engine_{path.stem}_{digest}"

        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"Cannot import {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            try:
                spec.loader.exec_module(module)
            except BaseException:
                sys.modules.pop(module_name, None)
                raise
        except Exception as e:
            logger.error(f"Failed to load scenario file {path}: {e}")
            raise ValueError(f"Failed to load scenario file {path}: {e}") from e

        exported = getattr(module, "scenarios", None)
        if exported is not None:
            if isinstance(exported, ScenarioDefinition):
                candidates = [exported]
            else:
                candidates = list(exported)
        else:
            candidates = [v for v in vars(module).values() if isinstance(v, ScenarioDefinition)]

        definitions: List[ScenarioDefinition] = []
        seen = set()
        for candidate in candidates:
            if not isinstance(candidate, ScenarioDefinition):
                raise ValueError(f"{path}: 'scenarios' must contain ScenarioDefinition objects, got {type(candidate).__name__}")
            if id(candidate) in seen:
                continue
            seen.add(id(candidate))

            if not candidate.validate():
                raise ValueError(f"Invalid scenario '{candidate.name}' in {path}")

            definitions.append(candidate if candidate.origin is not None else candidate.with_origin(path))

        logger.info(f"Loaded {len(definitions)} scenarios from {path.name}")
        return definitions

    def load_files(self, files: Iterable[Path]) -> List[ScenarioDefinition]:
        scenarios: List[ScenarioDefinition] = []
        for path in files:
            scenarios.extend(self.load_file(path))
        return scenarios

    def load(self, paths: Iterable[Path]) -> List[ScenarioDefinition]:
        """Discover and load every scenario under ``paths``."""
        return self.load_files(self.discover(paths))
