"""CDK stack for one environment's IAM admins."""

from typing import Any

import aws_cdk as cdk
from constructs import Construct

from iam_infrastructure.cdk_constructs import AdminGroup
from iam_infrastructure.config import EnvironmentConfig


class IamAdminsStack(cdk.Stack):
  """Stack for a single environment (dev, prod, ...)."""

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    environment_config: EnvironmentConfig,
    **kwargs: Any,
  ) -> None:
    super().__init__(scope, id, **kwargs)

    self.admins = AdminGroup(
      self,
      "Admins",
      admin_group_name=environment_config.admin_group_name,
      usernames=environment_config.usernames,
      attach_administrator_access=environment_config.attach_administrator_access,
      create_access_keys=environment_config.create_access_keys,
      secret_prefix=f"iam-admins/{environment_config.name}",
    )

    cdk.Tags.of(self).add("Project", "iam-admins")
    cdk.Tags.of(self).add("Environment", environment_config.name)
