#!/usr/bin/env python3
"""Retrieve IAM admin access keys for an environment from Secrets Manager."""

import argparse
import json
import sys
from typing import Any

import boto3

SECRET_SUFFIX = "/access-key"


def get_credentials(
  secret_prefix: str,
  username: str | None = None,
  region: str = "us-east-1",
  client: Any = None,
) -> dict[str, dict[str, str]]:
  """Retrieve per-user access keys from Secrets Manager.

  Args:
    secret_prefix: Prefix the stack stored secrets under (e.g., 'iam-admins/dev')
    username: Only fetch this user's key
    region: AWS region
    client: Pre-built secretsmanager client

  Returns:
    Mapping of username to AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY
  """
  secrets = client or boto3.client("secretsmanager", region_name=region)
  prefix = secret_prefix.rstrip("/") + "/"

  if username:
    names = [f"{prefix}{username}{SECRET_SUFFIX}"]
  else:
    names = []
    paginator = secrets.get_paginator("list_secrets")
    for page in paginator.paginate(Filters=[{"Key": "name", "Values": [prefix]}]):
      for entry in page["SecretList"]:
        name = entry["Name"]
        if name.startswith(prefix) and name.endswith(SECRET_SUFFIX):
          names.append(name)

  credentials: dict[str, dict[str, str]] = {}
  for name in sorted(names):
    user = name[len(prefix) : -len(SECRET_SUFFIX)]
    response = secrets.get_secret_value(SecretId=name)
    credentials[user] = json.loads(response["SecretString"])

  return credentials


def main() -> None:
  """Main entry point."""
  parser = argparse.ArgumentParser(
    description="Retrieve IAM admin access keys for an environment"
  )
  parser.add_argument(
    "secret_prefix",
    help="Secrets Manager prefix (stack output AccessKeySecretPrefix, e.g. iam-admins/dev)",
  )
  parser.add_argument(
    "--username",
    help="Only show this user's key",
  )
  parser.add_argument(
    "--region",
    default="us-east-1",
    help="AWS region (default: us-east-1)",
  )
  parser.add_argument(
    "--format",
    choices=["env", "json", "export"],
    default="env",
    help="Output format (default: env)",
  )

  args = parser.parse_args()

  try:
    credentials = get_credentials(args.secret_prefix, args.username, args.region)
  except Exception as e:
    print(f"Error retrieving credentials: {e}", file=sys.stderr)
    sys.exit(1)

  if not credentials:
    print(f"No access keys found under {args.secret_prefix}", file=sys.stderr)
    sys.exit(1)

  if args.format == "json":
    print(json.dumps(credentials, indent=2))
    return

  for user, values in credentials.items():
    print(f"# {user}")
    for key, value in values.items():
      if args.format == "export":
        print(f"export {key}={value}")
      else:  # env format
        print(f"{key}={value}")


if __name__ == "__main__":
  main()
