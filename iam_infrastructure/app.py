#!/usr/bin/env python3
"""CDK application entry point for per-environment IAM admins."""

import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

import aws_cdk as cdk
import boto3

from iam_infrastructure.config import Config, EnvironmentConfig
from iam_infrastructure.stacks import IamAdminsStack


def get_account_id() -> str:
  """Get AWS account ID from current credentials."""
  sts = boto3.client("sts")
  return str(sts.get_caller_identity()["Account"])


def stack_name_for(environment: str) -> str:
  """Stack name used for an environment."""
  return f"IamAdmins-{environment}"


def resolve_environments(config: Config, only: str | None = None) -> list[EnvironmentConfig]:
  """Pick the environments to build.

  IAM_VAR_* overrides apply only to an environment selected by name.
  """
  if only:
    return [config.environment(only).with_overrides()]
  return list(config.environments)


def build_app(
  app: cdk.App,
  config: Config,
  *,
  only: str | None = None,
  account_id: str | None = None,
) -> dict[str, IamAdminsStack]:
  """Create one stack per configured environment.

  Args:
    app: CDK app to add stacks to
    config: Loaded configuration
    only: Restrict to this environment name
    account_id: Fallback account for environments without one

  Returns:
    Stacks keyed by environment name
  """
  stacks: dict[str, IamAdminsStack] = {}
  for env in resolve_environments(config, only):
    stacks[env.name] = IamAdminsStack(
      app,
      stack_name_for(env.name),
      environment_config=env,
      env=cdk.Environment(
        account=env.account or account_id,
        region=env.region,
      ),
      description=f"IAM admin group and users for {env.name}",
    )
  return stacks


def main() -> None:
  """Create CDK app with a stack for each configured environment."""
  app = cdk.App()

  # Load configuration
  config_path = app.node.try_get_context("config") or "environments.yaml"
  config = Config.from_yaml(Path(config_path))
  only = app.node.try_get_context("environment")

  # Only ask STS when an environment being built has no explicit account
  account_id = None
  if any(env.account is None for env in resolve_environments(config, only)):
    account_id = get_account_id()

  build_app(app, config, only=only, account_id=account_id)

  app.synth()


if __name__ == "__main__":
  main()
