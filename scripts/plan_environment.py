#!/usr/bin/env python3
"""Show which resources a deploy would create, update or delete for an environment."""

import argparse
import sys
from pathlib import Path
from typing import Any

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aws_cdk as cdk  # noqa: E402
import boto3  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402

from iam_infrastructure.app import build_app  # noqa: E402
from iam_infrastructure.config import Config  # noqa: E402
from iam_infrastructure.template_diff import (  # noqa: E402
  ResourceChange,
  diff_templates,
  load_template,
  summarize,
)

SYMBOLS = {"create": "+", "update": "~", "delete": "-"}


def synthesize_template(config_path: Path | str, environment: str) -> tuple[str, dict[str, Any]]:
  """Synthesize one environment's stack.

  Returns:
    Tuple of (stack name, template document)
  """
  app = cdk.App()
  config = Config.from_yaml(config_path)
  stack = build_app(app, config, only=environment)[environment]
  assembly = app.synth()
  return stack.stack_name, assembly.get_stack_by_name(stack.stack_name).template


def get_deployed_template(
  stack_name: str,
  region: str = "us-east-1",
  client: Any = None,
) -> dict[str, Any] | None:
  """Fetch the currently deployed template, or None if the stack does not exist."""
  cloudformation = client or boto3.client("cloudformation", region_name=region)
  try:
    response = cloudformation.get_template(StackName=stack_name, TemplateStage="Original")
  except ClientError as e:
    error = e.response.get("Error", {})
    if error.get("Code") == "ValidationError" and "does not exist" in error.get("Message", ""):
      return None
    raise
  return load_template(response["TemplateBody"])


def format_changes(changes: list[ResourceChange]) -> list[str]:
  """Render changes one per line, followed by a summary line."""
  lines = [
    f"{SYMBOLS[change.action]} {change.action:<6} {change.resource_type:<40} {change.logical_id}"
    for change in changes
  ]
  counts = summarize(changes)
  lines.append(
    f"Plan: {counts['create']} to create, {counts['update']} to update, "
    f"{counts['delete']} to delete."
  )
  return lines


def main() -> None:
  """Main entry point."""
  parser = argparse.ArgumentParser(description="Preview IAM admin changes for an environment")
  parser.add_argument(
    "environment",
    help="Environment name from the config file (e.g., dev)",
  )
  parser.add_argument(
    "--config",
    default="environments.yaml",
    help="Path to environments config (default: environments.yaml)",
  )
  args = parser.parse_args()

  try:
    config = Config.from_yaml(args.config)
    region = config.environment(args.environment).with_overrides().region
    stack_name, desired = synthesize_template(args.config, args.environment)
    deployed = get_deployed_template(stack_name, region)
  except Exception as e:
    print(f"Error planning {args.environment}: {e}", file=sys.stderr)
    sys.exit(1)

  if deployed is None:
    print(f"Stack {stack_name} does not exist yet; everything will be created")

  for line in format_changes(diff_templates(deployed, desired)):
    print(line)


if __name__ == "__main__":
  main()
