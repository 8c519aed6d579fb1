"""Pytest fixtures for CDK construct tests."""

import os

import aws_cdk as cdk
import pytest


@pytest.fixture
def app() -> cdk.App:
  """Create a CDK App for testing."""
  return cdk.App()


@pytest.fixture
def stack(app: cdk.App) -> cdk.Stack:
  """Create a CDK Stack for testing."""
  return cdk.Stack(app, "TestStack", env=cdk.Environment(region="us-east-1"))


@pytest.fixture(autouse=True)
def _clear_override_env(monkeypatch: pytest.MonkeyPatch) -> None:
  """Keep IAM_VAR_* from the developer's shell out of tests."""
  for key in list(os.environ):
    if key.startswith("IAM_VAR_"):
      monkeypatch.delenv(key)
