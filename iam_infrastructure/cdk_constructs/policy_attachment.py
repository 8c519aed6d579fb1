"""Standalone managed-policy attachment for an IAM group."""

from aws_cdk import aws_iam as iam
from aws_cdk import custom_resources as cr
from constructs import Construct

ADMINISTRATOR_ACCESS_ARN = "arn:aws:iam::aws:policy/AdministratorAccess"


class GroupPolicyAttachment(Construct):
  """Attach a managed policy to a group as a resource of its own.

  Adding or removing this construct attaches or detaches the policy without
  touching the group definition.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    group: iam.IGroup,
    policy_arn: str = ADMINISTRATOR_ACCESS_ARN,
  ) -> None:
    super().__init__(scope, id)

    self.policy_arn = policy_arn
    parameters = {"GroupName": group.group_name, "PolicyArn": policy_arn}

    # Physical id follows the group name so a renamed group gets a fresh attachment
    attach = cr.AwsSdkCall(
      service="IAM",
      action="attachGroupPolicy",
      parameters=parameters,
      physical_resource_id=cr.PhysicalResourceId.of(f"{group.group_name}|{policy_arn}"),
    )

    self.resource = cr.AwsCustomResource(
      self,
      "Resource",
      on_create=attach,
      on_update=attach,
      on_delete=cr.AwsSdkCall(
        service="IAM",
        action="detachGroupPolicy",
        parameters=parameters,
        ignore_error_codes_matching="NoSuchEntity",
      ),
      policy=cr.AwsCustomResourcePolicy.from_statements(
        [
          iam.PolicyStatement(
            actions=["iam:AttachGroupPolicy", "iam:DetachGroupPolicy"],
            resources=[group.group_arn],
          )
        ]
      ),
      install_latest_aws_sdk=False,
    )
