"""Configuration loader for per-environment IAM admin wiring."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

ENV_VAR_PREFIX = "IAM_VAR_"

_REQUIRED_FIELDS = ("name", "admin_group_name", "usernames")
_BOOL_FIELDS = ("attach_administrator_access", "create_access_keys")
_OVERRIDABLE_FIELDS = ("admin_group_name", "usernames", "region", "account", *_BOOL_FIELDS)


@dataclass
class EnvironmentConfig:
  """Inputs for one AdminGroup instantiation (one environment)."""

  name: str
  admin_group_name: str
  usernames: list[str]
  attach_administrator_access: bool = True
  create_access_keys: bool = False
  region: str = "us-east-1"
  account: str | None = None

  @classmethod
  def from_mapping(cls, data: Mapping[str, Any]) -> "EnvironmentConfig":
    """Build an environment config from an already merged mapping."""
    env_name = data.get("name", "<unnamed>")
    for key in _REQUIRED_FIELDS:
      if data.get(key) is None:
        raise ValueError(f"Environment {env_name!r} is missing required field {key!r}")

    usernames = data["usernames"]
    if not isinstance(usernames, list):
      raise ValueError(f"Environment {env_name!r}: usernames must be a list")

    for key in _BOOL_FIELDS:
      if key in data and not isinstance(data[key], bool):
        raise ValueError(
          f"Environment {env_name!r}: {key} must be true or false, got {data[key]!r}"
        )

    account = data.get("account")
    return cls(
      name=str(data["name"]),
      admin_group_name=str(data["admin_group_name"]),
      usernames=[str(u) for u in usernames],
      attach_administrator_access=data.get("attach_administrator_access", True),
      create_access_keys=data.get("create_access_keys", False),
      region=str(data.get("region", "us-east-1")),
      account=str(account) if account is not None else None,
    )

  def with_overrides(
    self,
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_VAR_PREFIX,
  ) -> "EnvironmentConfig":
    """Return a copy with `<prefix><field>` environment variables applied.

    Values are parsed as YAML so `true`, `false` and `["a", "b"]` behave
    the way they would in environments.yaml. A bare string given for
    `usernames` is split on commas.
    """
    if environ is None:
      environ = os.environ

    changes: dict[str, Any] = {}
    for key, raw in environ.items():
      if not key.startswith(prefix):
        continue
      field_name = key[len(prefix) :]
      if field_name not in _OVERRIDABLE_FIELDS:
        continue

      value: Any = raw
      if field_name == "usernames":
        value = yaml.safe_load(raw) if raw.strip() else []
        if isinstance(value, str):
          value = [u.strip() for u in value.split(",") if u.strip()]
        elif value is None:
          value = []
        elif not isinstance(value, list):
          raise ValueError(f"{key} must be a list or comma-separated string")
        value = [str(u) for u in value]
      elif field_name in _BOOL_FIELDS:
        value = yaml.safe_load(raw)
        if not isinstance(value, bool):
          raise ValueError(f"{key} must be true or false, got {raw!r}")

      changes[field_name] = value

    return replace(self, **changes)


@dataclass
class Config:
  """All configured environments."""

  environments: list[EnvironmentConfig] = field(default_factory=list)

  @classmethod
  def from_yaml(cls, path: Path | str = "environments.yaml") -> "Config":
    """Load configuration from YAML file."""
    with open(path) as f:
      data = yaml.safe_load(f) or {}

    defaults = data.get("defaults", {})
    environments: list[EnvironmentConfig] = []

    for env_data in data.get("environments", []):
      # Merge defaults with environment-specific config
      merged = {**defaults, **env_data}
      environments.append(EnvironmentConfig.from_mapping(merged))

    names = [env.name for env in environments]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
      raise ValueError(f"Duplicate environment names: {', '.join(duplicates)}")

    return cls(environments=environments)

  def environment(self, name: str) -> EnvironmentConfig:
    """Look up one environment by name."""
    for env in self.environments:
      if env.name == name:
        return env
    raise KeyError(f"Unknown environment {name!r}")
