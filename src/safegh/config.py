"""
Configuration loading for safe-gh.

The config is a YAML file validated into a frozen Config model. It is
loaded once by the CLI and passed explicitly to whatever needs it.

Location, first match wins:
    1. --config PATH
    2. $SAFE_GH_CONFIG
    3. ~/.config/safe-gh/config.yaml
"""

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from safegh.errors import ConfigError
from safegh.schema import Config

CONFIG_ENV_VAR = "SAFE_GH_CONFIG"

CONFIG_TEMPLATE = """\
# safe-gh configuration
#
# Rules are evaluated in order per resource; the first rule whose
# operations include the requested one and whose condition holds wins.
# With no match, defaultPermission decides ("deny" or "read").

# Only these owners (orgs or users) may be targeted
allowedOwners:
  - my-org

# Login that "self" refers to in createdBy / assignee conditions
selfUserId: "{self_user_id}"

defaultPermission: deny

issueRules:
  - name: Work on issues assigned to me
    operations: [update, close, reopen, comment]
    condition:
      assignee: self
  - name: Comment on any issue
    operations: [comment]

prRules:
  - name: Manage my own pull requests
    operations: [update, close, comment]
    condition:
      createdBy: self
  - name: Open draft pull requests from feature branches
    operations: [create]
    condition:
      draft: true
      headBranch: ["feature/*"]
    enforce:
      addAssignees: [self]

searchRules:
  - name: Search inside my org
    operations: [code, issues, prs]
    condition:
      owners: [my-org]

projectRules: []

aiMarker:
  enabled: false
  visiblePrefix: "\\U0001F916 "
"""


def default_config_path() -> Path:
    return Path.home() / ".config" / "safe-gh" / "config.yaml"


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Pick the config path from the flag, the environment, or the default."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return default_config_path()


def load_config(path: Path | str | None = None) -> Config:
    """
    Load and validate the config file.

    Args:
        path: Explicit path, or None to resolve it

    Returns:
        Validated Config object

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or does not
            match the schema
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise ConfigError(
            message=f"Config file not found: {config_path}",
            path=str(config_path),
            suggestion="Run 'safe-gh config init' to create one",
        )

    try:
        with config_path.open(encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            message=f"Cannot read config file: {e}",
            path=str(config_path),
        ) from e

    return load_config_from_string(content, source=str(config_path))


def load_config_from_string(content: str, source: str | None = None) -> Config:
    """
    Load a config from a YAML string.

    Raises:
        ConfigError: If the YAML is invalid or does not match the schema
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML: {e}", path=source) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            message=f"Config must be a mapping, got {type(data).__name__}",
            path=source,
        )

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            message="Invalid config:\n" + format_validation_errors(e),
            path=source,
        ) from e


def format_validation_errors(error: ValidationError) -> str:
    """One "location: message" line per pydantic error."""
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "(root)"
        lines.append(f"{location}: {item['msg']}")
    return "\n".join(lines)


def render_template(self_user_id: str = "") -> str:
    return CONFIG_TEMPLATE.format(self_user_id=self_user_id)


def init_config(path: Path | str | None = None, self_user_id: str = "") -> Path:
    """
    Write the config template.

    Returns:
        The path written

    Raises:
        ConfigError: If a config file already exists at the path
    """
    config_path = resolve_config_path(path)
    if config_path.exists():
        raise ConfigError(
            message=f"Config file already exists: {config_path}",
            path=str(config_path),
        )

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(render_template(self_user_id), encoding="utf-8")
    return config_path
