"""Compare two CloudFormation templates resource by resource."""

import json
from collections import Counter
from dataclasses import dataclass
from typing import Any, Literal

import yaml

Action = Literal["create", "delete", "update"]

# Keys of a resource entry whose change means the resource itself changes
_COMPARED_KEYS = ("Type", "Properties", "DependsOn", "Condition", "DeletionPolicy")

# Added by CDK version reporting, which the CLI enables and plain App() does not
_IGNORED_TYPES = frozenset({"AWS::CDK::Metadata"})


@dataclass(frozen=True)
class ResourceChange:
  """A single planned change, identified by logical id."""

  logical_id: str
  resource_type: str
  action: Action


def load_template(body: dict[str, Any] | str | None) -> dict[str, Any]:
  """Normalize a template body as returned by CloudFormation GetTemplate.

  JSON templates come back already parsed; YAML (and sometimes JSON) come
  back as a string.
  """
  if body is None:
    return {}
  if isinstance(body, dict):
    return body
  try:
    return json.loads(body)
  except json.JSONDecodeError:
    # CloudFormation short-form tags (!Ref, !Sub) are not plain YAML
    return yaml.load(body, Loader=_CfnLoader) or {}


class _CfnLoader(yaml.SafeLoader):
  """SafeLoader that keeps CloudFormation intrinsic tags as plain mappings."""


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
  name = "Ref" if tag_suffix == "Ref" else f"Fn::{tag_suffix}"
  if isinstance(node, yaml.ScalarNode):
    value: Any = loader.construct_scalar(node)
  elif isinstance(node, yaml.SequenceNode):
    value = loader.construct_sequence(node, deep=True)
  else:
    value = loader.construct_mapping(node, deep=True)
  return {name: value}


_CfnLoader.add_multi_constructor("!", _construct_intrinsic)


def _normalized(resource: dict[str, Any]) -> dict[str, Any]:
  entry = {key: resource.get(key) for key in _COMPARED_KEYS}
  depends_on = entry["DependsOn"]
  if isinstance(depends_on, str):
    entry["DependsOn"] = [depends_on]
  elif isinstance(depends_on, list):
    entry["DependsOn"] = sorted(depends_on)
  return entry


def _resources(template: dict[str, Any] | None) -> dict[str, Any]:
  resources = (template or {}).get("Resources", {}) or {}
  return {
    logical_id: resource
    for logical_id, resource in resources.items()
    if resource.get("Type") not in _IGNORED_TYPES
  }


def diff_templates(
  before: dict[str, Any] | None,
  after: dict[str, Any] | None,
) -> list[ResourceChange]:
  """List resource changes needed to go from `before` to `after`.

  Resources are matched by logical id. Unchanged resources and CDK
  version-reporting metadata are omitted.
  """
  old = _resources(before)
  new = _resources(after)

  changes: list[ResourceChange] = []
  for logical_id in sorted(old.keys() - new.keys()):
    changes.append(ResourceChange(logical_id, old[logical_id].get("Type", ""), "delete"))

  for logical_id in sorted(new.keys() - old.keys()):
    changes.append(ResourceChange(logical_id, new[logical_id].get("Type", ""), "create"))

  for logical_id in sorted(old.keys() & new.keys()):
    if _normalized(old[logical_id]) != _normalized(new[logical_id]):
      changes.append(ResourceChange(logical_id, new[logical_id].get("Type", ""), "update"))

  return changes


def summarize(changes: list[ResourceChange]) -> dict[str, int]:
  """Count changes per action, always reporting all three actions."""
  counts = Counter(change.action for change in changes)
  return {action: counts.get(action, 0) for action in ("create", "update", "delete")}
