"""Reusable admin group construct: group, policy, users, memberships, keys."""

import json
from collections.abc import Sequence

from aws_cdk import Annotations, CfnOutput, SecretValue
from aws_cdk import aws_iam as iam
from constructs import Construct

from .admin_user import AdminUser
from .force_destroy import UserForceDestroyProvider
from .policy_attachment import ADMINISTRATOR_ACCESS_ARN, GroupPolicyAttachment


class AdminGroup(Construct):
  """IAM admin group with its member users.

  Creates:
  - IAM group named `admin_group_name`
  - (Optional) AdministratorAccess attachment on the group
  - One IAM user per distinct username, each with its own membership
  - Force-destroy cleanup for every user
  - (Optional) One access key per user, stored in Secrets Manager

  Users are keyed by username, so adding or removing a name only adds or
  removes that user's resources. Duplicate usernames collapse into one user.

  Outputs (as attributes):
  - group_name: the group's name
  - iam_usernames: the usernames exactly as given
  - iam_user_access_keys: username -> access key id (sensitive)
  - iam_user_secret_keys: username -> secret access key (sensitive)
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    admin_group_name: str,
    usernames: Sequence[str],
    attach_administrator_access: bool = True,
    create_access_keys: bool = False,
    secret_prefix: str = "",
  ) -> None:
    super().__init__(scope, id)

    self.group = iam.Group(self, "Group", group_name=admin_group_name)

    self.policy_attachment: GroupPolicyAttachment | None = None
    if attach_administrator_access:
      self.policy_attachment = GroupPolicyAttachment(
        self,
        "AdministratorAccess",
        group=self.group,
        policy_arn=ADMINISTRATOR_ACCESS_ARN,
      )

    keys = list(dict.fromkeys(usernames))
    if not keys:
      Annotations.of(self).add_warning_v2(
        "iam-infrastructure:emptyUsernames",
        f"No usernames given for group {admin_group_name}; it will have no members",
      )
    elif len(keys) != len(usernames):
      duplicates = sorted({u for u in usernames if list(usernames).count(u) > 1})
      Annotations.of(self).add_warning_v2(
        "iam-infrastructure:duplicateUsernames",
        f"Duplicate usernames collapse into one user each: {', '.join(duplicates)}",
      )

    self.force_destroy: UserForceDestroyProvider | None = None
    if keys:
      self.force_destroy = UserForceDestroyProvider(self, "ForceDestroy")

    self.secret_prefix = secret_prefix or admin_group_name
    users_scope = Construct(self, "Users")
    self.users: dict[str, AdminUser] = {}
    for username in keys:
      self.users[username] = AdminUser(
        users_scope,
        username,
        username=username,
        group=self.group,
        create_access_key=create_access_keys,
        cleanup_service_token=self.force_destroy.service_token
        if self.force_destroy
        else None,
        secret_prefix=self.secret_prefix,
      )

    # Outputs
    self.group_name = self.group.group_name
    self.iam_usernames = list(usernames)
    self.iam_user_access_keys: dict[str, str] = {
      name: user.access_key.access_key_id
      for name, user in self.users.items()
      if user.access_key is not None
    }
    self.iam_user_secret_keys: dict[str, SecretValue] = {
      name: user.access_key.secret_access_key
      for name, user in self.users.items()
      if user.access_key is not None
    }

    CfnOutput(
      self,
      "GroupName",
      value=self.group_name,
      description="Admin IAM group name",
    )
    CfnOutput(
      self,
      "IamUsernames",
      value=json.dumps(self.iam_usernames),
      description="IAM usernames as configured",
    )
    if create_access_keys and self.users:
      CfnOutput(
        self,
        "AccessKeySecretPrefix",
        value=self.secret_prefix,
        description="Secrets Manager prefix holding <username>/access-key secrets",
      )
