"""
Render configuration provider.

Settings come from two layers:
- Global defaults read from the environment (``.env`` is loaded via python-dotenv)
- Per-folder overrides read from ``umlpress.yaml`` at the root of a workspace folder

Every lookup is keyed by the resource (diagram file) it is made for, so a diagram
picks up the overrides of the workspace folder that contains it.

Environment variables:
    PLANTUML_JAVA           Java executable (default: ``java`` found on PATH)
    PLANTUML_JAR            PlantUML jar (default: <PLANTUML_HOME>/plantuml.jar)
    PLANTUML_HOME           Install location of the jar (default: ~/.umlpress)
    PLANTUML_INCLUDE_PATHS  Extra include paths, separated by os.pathsep
    PLANTUML_DIAGRAMS_ROOT  Root folder of diagrams, added to the include path
    PLANTUML_COMMAND_ARGS   Extra arguments placed before ``-jar`` (JVM options)
    PLANTUML_JAR_ARGS       Extra arguments placed after the jar options
    INKSCAPE_PATH           Inkscape executable used for EMF conversion

Example umlpress.yaml:
    jar: tools/plantuml.jar
    include_paths: [docs/includes, shared]
    diagrams_root: docs/diagrams
    command_args: ["-DPLANTUML_LIMIT_SIZE=8192"]
    jar_args: ["-nometadata"]
"""

import os
import shlex
import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

CONFIG_FILENAME = "umlpress.yaml"
JAR_FILENAME = "plantuml.jar"
DEFAULT_CONVERTER = "/usr/bin/inkscape"

# Keys a workspace folder may override (java and the converter are global)
FOLDER_KEYS = {"jar", "include_paths", "diagrams_root", "command_args", "jar_args"}


def _split_args(value: Union[str, Sequence[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return shlex.split(value)
    return [str(v) for v in value]


def _split_paths(value: Union[str, Sequence[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split(os.pathsep)
    return [str(v) for v in value]


@dataclass
class RenderSettings:
    """
    Resolved render settings for one scope (global or one workspace folder).

    Attributes:
        java: Java executable, None when not installed
        jar: PlantUML jar, None to use the jar in install_location
        include_paths: Extra include paths (relative ones resolve against the workspace root)
        diagrams_root: Diagrams root folder, added last to the include path
        command_args: Arguments placed before the engine options
        jar_args: Arguments appended after the engine options
        converter: Secondary converter executable (Inkscape)
        install_location: Folder where the jar is expected by default
    """

    java: Optional[str] = None
    jar: Optional[Path] = None
    include_paths: List[str] = field(default_factory=list)
    diagrams_root: Optional[Path] = None
    command_args: List[str] = field(default_factory=list)
    jar_args: List[str] = field(default_factory=list)
    converter: str = DEFAULT_CONVERTER
    install_location: Path = field(default_factory=lambda: Path.home() / ".umlpress")

    @classmethod
    def from_env(cls) -> "RenderSettings":
        """Build global settings from environment variables."""
        jar = os.getenv("PLANTUML_JAR")
        diagrams_root = os.getenv("PLANTUML_DIAGRAMS_ROOT")
        install_location = os.getenv("PLANTUML_HOME")

        return cls(
            java=os.getenv("PLANTUML_JAVA") or shutil.which("java"),
            jar=Path(jar).expanduser() if jar else None,
            include_paths=_split_paths(os.getenv("PLANTUML_INCLUDE_PATHS")),
            diagrams_root=Path(diagrams_root).expanduser() if diagrams_root else None,
            command_args=_split_args(os.getenv("PLANTUML_COMMAND_ARGS")),
            jar_args=_split_args(os.getenv("PLANTUML_JAR_ARGS")),
            converter=os.getenv("INKSCAPE_PATH") or DEFAULT_CONVERTER,
            install_location=(
                Path(install_location).expanduser()
                if install_location
                else Path.home() / ".umlpress"
            ),
        )


def load_folder_overrides(config_path: Path) -> Dict[str, Any]:
    """
    Load per-folder overrides from a umlpress.yaml file.

    Relative ``jar`` and ``diagrams_root`` values resolve against the folder
    holding the config file.

    Raises:
        ValueError: If the file is not a mapping or contains unknown keys
    """
    raw = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid config in {config_path}: expected a mapping")

    unknown = set(raw) - FOLDER_KEYS
    if unknown:
        raise ValueError(
            f"Invalid config in {config_path}: unknown keys {', '.join(sorted(unknown))}"
        )

    folder = config_path.parent
    overrides: Dict[str, Any] = {}
    if raw.get("jar"):
        overrides["jar"] = folder / Path(raw["jar"]).expanduser()
    if raw.get("diagrams_root"):
        overrides["diagrams_root"] = folder / Path(raw["diagrams_root"]).expanduser()
    if "include_paths" in raw:
        overrides["include_paths"] = _split_paths(raw["include_paths"])
    if "command_args" in raw:
        overrides["command_args"] = _split_args(raw["command_args"])
    if "jar_args" in raw:
        overrides["jar_args"] = _split_args(raw["jar_args"])
    return overrides


class ConfigProvider:
    """
    Per-resource view over the render settings.

    Args:
        settings: Global settings (default: read from the environment)
        workspace_folders: Folders that may carry a umlpress.yaml override file

    Example:
        >>> config = ConfigProvider(workspace_folders=[Path("~/project").expanduser()])
        >>> config.jar(Path("~/project/docs/seq.puml").expanduser())
    """

    def __init__(
        self,
        settings: Optional[RenderSettings] = None,
        workspace_folders: Sequence[Union[str, Path]] = (),
    ):
        self.settings = settings if settings is not None else RenderSettings.from_env()
        self.workspace_folders = [Path(f).expanduser().resolve() for f in workspace_folders]
        self._folder_cache: Dict[Path, RenderSettings] = {}

    @property
    def java(self) -> Optional[str]:
        return self.settings.java

    @property
    def converter(self) -> str:
        return self.settings.converter

    @property
    def install_location(self) -> Path:
        return self.settings.install_location

    def workspace_root(self, resource: Optional[Path]) -> Optional[Path]:
        """Innermost workspace folder containing the resource, or None."""
        if resource is None:
            return None
        resource = Path(resource).expanduser().resolve()
        matches = [
            folder
            for folder in self.workspace_folders
            if folder == resource or folder in resource.parents
        ]
        if not matches:
            return None
        return max(matches, key=lambda folder: len(folder.parts))

    def settings_for(self, resource: Optional[Path]) -> RenderSettings:
        """Global settings merged with the overrides of the resource's workspace folder."""
        root = self.workspace_root(resource)
        if root is None:
            return self.settings

        if root not in self._folder_cache:
            config_path = root / CONFIG_FILENAME
            if config_path.is_file():
                self._folder_cache[root] = replace(
                    self.settings, **load_folder_overrides(config_path)
                )
            else:
                self._folder_cache[root] = self.settings
        return self._folder_cache[root]

    def jar(self, resource: Optional[Path]) -> Path:
        settings = self.settings_for(resource)
        return settings.jar or settings.install_location / JAR_FILENAME

    def include_paths(self, resource: Optional[Path]) -> List[str]:
        return list(self.settings_for(resource).include_paths)

    def diagrams_root(self, resource: Optional[Path]) -> Optional[Path]:
        """Diagrams root, relative values resolved against the workspace root."""
        diagrams_root = self.settings_for(resource).diagrams_root
        if diagrams_root is None or diagrams_root.is_absolute():
            return diagrams_root
        root = self.workspace_root(resource)
        return root / diagrams_root if root is not None else diagrams_root.resolve()

    def command_args(self, resource: Optional[Path]) -> List[str]:
        return list(self.settings_for(resource).command_args)

    def jar_args(self, resource: Optional[Path]) -> List[str]:
        return list(self.settings_for(resource).jar_args)
