"""Tests for the per-environment stack and app wiring."""

import pytest
from aws_cdk import App
from aws_cdk.assertions import Match, Template

from iam_infrastructure.app import build_app, resolve_environments, stack_name_for
from iam_infrastructure.config import Config, EnvironmentConfig
from iam_infrastructure.stacks import IamAdminsStack


def _config() -> Config:
  return Config(
    environments=[
      EnvironmentConfig(
        name="dev",
        admin_group_name="dev-admins",
        usernames=["dev-alice", "dev-bob"],
        create_access_keys=True,
      ),
      EnvironmentConfig(
        name="prod",
        admin_group_name="prod-admins",
        usernames=["prod-alice"],
        region="eu-west-1",
      ),
    ]
  )


class TestIamAdminsStack:
  """Test a single environment stack."""

  @pytest.fixture
  def template(self) -> Template:
    app = App()
    stack = IamAdminsStack(
      app,
      "IamAdmins-dev",
      environment_config=_config().environment("dev"),
    )
    return Template.from_stack(stack)

  def test_group_and_users(self, template: Template) -> None:
    template.has_resource_properties("AWS::IAM::Group", {"GroupName": "dev-admins"})
    template.resource_count_is("AWS::IAM::User", 2)
    template.resource_count_is("AWS::IAM::AccessKey", 2)

  def test_users_tagged_with_environment(self, template: Template) -> None:
    template.has_resource_properties(
      "AWS::IAM::User",
      {
        "UserName": "dev-alice",
        "Tags": Match.array_with(
          [
            {"Key": "Environment", "Value": "dev"},
            {"Key": "Project", "Value": "iam-admins"},
          ]
        ),
      },
    )

  def test_secrets_scoped_to_environment(self, template: Template) -> None:
    template.has_resource_properties(
      "AWS::SecretsManager::Secret",
      {"Name": "iam-admins/dev/dev-alice/access-key"},
    )
    template.has_output(
      "*",
      {"Value": "iam-admins/dev"},
    )


class TestBuildApp:
  """Test environment wiring."""

  def test_one_stack_per_environment(self) -> None:
    app = App()
    stacks = build_app(app, _config(), account_id="123456789012")

    assert sorted(stacks) == ["dev", "prod"]
    assert stacks["dev"].stack_name == stack_name_for("dev") == "IamAdmins-dev"
    assert stacks["prod"].stack_name == "IamAdmins-prod"
    assert stacks["prod"].region == "eu-west-1"
    assert stacks["dev"].account == "123456789012"

  def test_environments_are_isolated(self) -> None:
    """No resource appears in more than one environment's stack."""
    app = App()
    stacks = build_app(app, _config())

    dev = Template.from_stack(stacks["dev"])
    prod = Template.from_stack(stacks["prod"])
    dev.has_resource_properties("AWS::IAM::Group", {"GroupName": "dev-admins"})
    prod.has_resource_properties("AWS::IAM::Group", {"GroupName": "prod-admins"})
    prod.resource_count_is("AWS::IAM::User", 1)
    prod.resource_count_is("AWS::IAM::AccessKey", 0)

  def test_only_builds_requested_environment(self) -> None:
    app = App()
    stacks = build_app(app, _config(), only="prod")
    assert list(stacks) == ["prod"]

  def test_unknown_environment(self) -> None:
    with pytest.raises(KeyError):
      build_app(App(), _config(), only="staging")

  def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IAM_VAR_create_access_keys", "true")
    monkeypatch.setenv("IAM_VAR_usernames", '["ops-1", "ops-2", "ops-3"]')

    app = App()
    stacks = build_app(app, _config(), only="prod")
    template = Template.from_stack(stacks["prod"])

    template.resource_count_is("AWS::IAM::User", 3)
    template.resource_count_is("AWS::IAM::AccessKey", 3)

  def test_overrides_ignored_without_selected_environment(
    self, monkeypatch: pytest.MonkeyPatch
  ) -> None:
    """Building every environment keeps each one's own group and users."""
    monkeypatch.setenv("IAM_VAR_admin_group_name", "ops-admins")
    monkeypatch.setenv("IAM_VAR_usernames", "alice")

    app = App()
    stacks = build_app(app, _config())

    names: dict[str, set[str]] = {}
    for env_name, stack in stacks.items():
      template = Template.from_stack(stack)
      groups = template.find_resources("AWS::IAM::Group")
      users = template.find_resources("AWS::IAM::User")
      names[env_name] = {r["Properties"]["GroupName"] for r in groups.values()} | {
        r["Properties"]["UserName"] for r in users.values()
      }

    assert names["dev"] == {"dev-admins", "dev-alice", "dev-bob"}
    assert names["prod"] == {"prod-admins", "prod-alice"}
    assert names["dev"].isdisjoint(names["prod"])


class TestResolveEnvironments:
  """Test which environment configs get built."""

  def test_all_environments_from_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IAM_VAR_account", "111111111111")

    environments = resolve_environments(_config())

    assert [env.name for env in environments] == ["dev", "prod"]
    assert all(env.account is None for env in environments)

  def test_selected_environment_gets_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IAM_VAR_account", "111111111111")

    environments = resolve_environments(_config(), only="dev")

    assert [env.name for env in environments] == ["dev"]
    assert environments[0].account == "111111111111"
