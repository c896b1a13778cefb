"""Run configuration files.

Two file sources are recognized:

- `.crcpconfig.json` in the current directory (or any path given with
  --config), with camelCase keys:

      {
        "sourceRepoUrl": "git@github.com:acme/lib.git",
        "sourceBranch": "main",
        "commitHash": "abc123",
        "targetBranch": "release"
      }

- a `[tool.crcp]` table in the repository's pyproject.toml, with snake_case keys:

      [tool.crcp]
      source_repo_url = "git@github.com:acme/lib.git"
      source_branch = "main"
      commit_hash = "abc123"
      target_branch = "release"

All four fields are required in either source.
"""

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crcp.core.errors import ConfigError

CONFIG_FILE_NAME = ".crcpconfig.json"
PYPROJECT_TABLE = "crcp"

CONFIG_KEYS = ("source_repo_url", "source_branch", "commit_hash", "target_branch")

_MISSING_FIELD_MESSAGES = {
    "source_repo_url": "The source repository URL is missing in the configuration file.",
    "source_branch": "The source branch is missing in the configuration file.",
    "commit_hash": "The commit hash is missing in the configuration file.",
    "target_branch": "The target branch is missing in the configuration file.",
}


class CrcpConfigFile(BaseModel):
    """Schema shared by both file sources.

    Accepts the camelCase aliases used by `.crcpconfig.json` as well as the
    snake_case names used in pyproject.toml.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    source_repo_url: str = Field(alias="sourceRepoUrl", min_length=1)
    source_branch: str = Field(alias="sourceBranch", min_length=1)
    commit_hash: str = Field(alias="commitHash", min_length=1)
    target_branch: str = Field(alias="targetBranch", min_length=1)


@dataclass(frozen=True)
class FileConfig:
    """A validated configuration and the file it came from."""

    source_repo_url: str
    source_branch: str
    commit_hash: str
    target_branch: str
    origin: Path


def _validate(data: object, origin: Path) -> FileConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"{origin} must contain a table/object of settings.")
    try:
        model = CrcpConfigFile.model_validate(data)
    except ValidationError as e:
        fields = []
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else ""
            fields.append(_field_name(field))
        messages = [_MISSING_FIELD_MESSAGES.get(f, f"Invalid value for '{f}'.") for f in fields]
        raise ConfigError(f"{origin}: " + " ".join(dict.fromkeys(messages))) from e
    return FileConfig(
        source_repo_url=model.source_repo_url,
        source_branch=model.source_branch,
        commit_hash=model.commit_hash,
        target_branch=model.target_branch,
        origin=origin,
    )


def _field_name(loc: str) -> str:
    for name, info in CrcpConfigFile.model_fields.items():
        if loc in (name, info.alias):
            return name
    return loc


def load_json_config(path: Path) -> FileConfig:
    """Load and validate a `.crcpconfig.json` style file.

    Raises:
        ConfigError: If the file is unreadable, not JSON, or incomplete
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Configuration file {path} is not valid JSON: {e}") from e
    return _validate(data, path)


def read_pyproject_table(repo_root: Path) -> dict[str, object] | None:
    """Return the raw [tool.crcp] table, or None if there is none."""
    pyproject_path = repo_root / "pyproject.toml"
    if not pyproject_path.exists():
        return None

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"{pyproject_path} is not valid TOML: {e}") from e

    tool_section = data.get("tool")
    if tool_section is None:
        return None
    return tool_section.get(PYPROJECT_TABLE)


def load_pyproject_config(repo_root: Path) -> FileConfig | None:
    """Load [tool.crcp] from pyproject.toml, or None if the table is absent."""
    table = read_pyproject_table(repo_root)
    if table is None:
        return None
    return _validate(table, repo_root / "pyproject.toml")


def load_file_config(
    *, cwd: Path, repo_root: Path | None, explicit_path: Path | None
) -> FileConfig | None:
    """Find the configuration file for this run, if any.

    Precedence: explicit_path, then `.crcpconfig.json` in cwd, then
    `[tool.crcp]` in the repository's pyproject.toml.

    Raises:
        ConfigError: If the chosen source exists but is invalid or incomplete,
            or if explicit_path does not exist
    """
    if explicit_path is not None:
        if not explicit_path.exists():
            raise ConfigError(f"Configuration file {explicit_path} does not exist.")
        return load_json_config(explicit_path)

    default_path = cwd / CONFIG_FILE_NAME
    if default_path.exists():
        return load_json_config(default_path)

    if repo_root is not None:
        return load_pyproject_config(repo_root)
    return None


def write_pyproject_value(repo_root: Path, key: str, value: str) -> Path:
    """Set one [tool.crcp] key in pyproject.toml.

    Creates or updates the [tool.crcp] section. Preserves existing formatting
    and comments using tomlkit.

    Raises:
        ConfigError: If key is not a recognized setting
    """
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Unknown key '{key}'. Valid keys: {', '.join(CONFIG_KEYS)}")

    pyproject_path = repo_root / "pyproject.toml"

    # Load existing file or create new document
    if pyproject_path.exists():
        with pyproject_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()

    if "tool" not in doc:
        doc["tool"] = tomlkit.table(is_super_table=True)  # type: ignore[index]

    if PYPROJECT_TABLE not in doc["tool"]:  # type: ignore[operator]
        doc["tool"][PYPROJECT_TABLE] = tomlkit.table()  # type: ignore[index]

    doc["tool"][PYPROJECT_TABLE][key] = value  # type: ignore[index]

    with pyproject_path.open("w", encoding="utf-8") as f:
        tomlkit.dump(doc, f)
    return pyproject_path
