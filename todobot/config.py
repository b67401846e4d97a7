from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
import tomllib

from .errors import ConfigError


def _as_bool(value, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "y", "on"}:
            return True
        if lowered in {"0", "false", "no", "n", "off"}:
            return False
    return bool(default)


def _as_str(value, *, default: str = "") -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return default
    return str(value)


def toml_string(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(value, ensure_ascii=False)


@dataclass(frozen=True)
class GitConfig:
    username: str = ""
    mail: str = ""
    token: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.username.strip() and self.token.strip())


@dataclass(frozen=True)
class TodoConfig:
    data_path: str = ""
    debug: bool = False
    git: GitConfig = field(default_factory=GitConfig)


def load_config(path: Path) -> TodoConfig:
    """Load config.toml; a missing file yields defaults.

    A file that exists but does not parse is fatal: rewriting it with defaults
    would silently drop the user's credentials.
    """

    if not path.exists():
        return TodoConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"{path.name} parse failed: {exc}") from exc

    git = data.get("git") if isinstance(data.get("git"), dict) else {}
    return TodoConfig(
        data_path=_as_str(data.get("data_path")),
        debug=_as_bool(data.get("debug"), default=TodoConfig.debug),
        git=GitConfig(
            username=_as_str(git.get("username")),
            mail=_as_str(git.get("mail")),
            token=_as_str(git.get("token")),
        ),
    )


def render_config(config: TodoConfig) -> str:
    lines = [
        f"data_path = {toml_string(config.data_path)}",
        f"debug = {'true' if config.debug else 'false'}",
        "",
        "[git]",
        f"username = {toml_string(config.git.username)}",
        f"mail = {toml_string(config.git.mail)}",
        f"token = {toml_string(config.git.token)}",
    ]
    return "\n".join(lines) + "\n"


def write_config(path: Path, config: TodoConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_config(config), encoding="utf-8")


def explain_config(config: TodoConfig, *, path: Path | None = None) -> str:
    location = str(path) if path is not None else "config.toml"
    token_state = "set" if config.git.token else "not set"
    lines = [
        f"config guide ({location})",
        "",
        f"- data_path: directory holding records.toml (current: {config.data_path or '(default)'})",
        f"- debug: append events to logs/events.jsonl (current: {'on' if config.debug else 'off'})",
        "",
        "[git]",
        f"- username: remote user for pull/push (current: {config.git.username or '(none)'})",
        f"- mail: commit author email (current: {config.git.mail or '(none)'})",
        f"- token: remote access token (current: {token_state})",
        f"- sync: {'enabled' if config.git.enabled else 'disabled (needs username and token)'}",
    ]
    return "\n".join(lines)
