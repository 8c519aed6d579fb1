"""One admin IAM user with its group membership and optional access key."""

from aws_cdk import CustomResource, RemovalPolicy, SecretValue
from aws_cdk import aws_iam as iam
from aws_cdk import aws_secretsmanager as secretsmanager
from constructs import Construct


class AdminUser(Construct):
  """IAM user bound to the admin group, keyed by its username.

  Creates:
  - IAM user
  - Group membership (AWS::IAM::UserToGroupAddition for this user only)
  - Force-destroy cleanup custom resource (when a cleanup service token is given)
  - (Optional) Access key, with the key pair stored in Secrets Manager as:
  {
    "AWS_ACCESS_KEY_ID": "...",
    "AWS_SECRET_ACCESS_KEY": "..."
  }
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
    *,
    username: str,
    group: iam.IGroup,
    create_access_key: bool = False,
    cleanup_service_token: str | None = None,
    secret_prefix: str = "",
  ) -> None:
    super().__init__(scope, id)

    self.username = username
    self.access_key: iam.AccessKey | None = None
    self.credentials_secret: secretsmanager.Secret | None = None
    self.cleanup: CustomResource | None = None

    self.user = iam.User(self, "User", user_name=username)

    # Membership is its own resource so each user reconciles independently
    self.membership = iam.CfnUserToGroupAddition(
      self,
      "Membership",
      group_name=group.group_name,
      users=[self.user.user_name],
    )

    if cleanup_service_token:
      self.cleanup = CustomResource(
        self,
        "ForceDestroy",
        service_token=cleanup_service_token,
        properties={"UserName": self.user.user_name},
      )
      # Managed children go first so the cleanup only sees out-of-band leftovers
      self.membership.node.add_dependency(self.cleanup)

    if create_access_key:
      self.access_key = iam.AccessKey(self, "AccessKey", user=self.user)
      if self.cleanup is not None:
        self.access_key.node.add_dependency(self.cleanup)

      prefix = secret_prefix or group.group_name
      self.credentials_secret = secretsmanager.Secret(
        self,
        "Credentials",
        secret_name=f"{prefix}/{username}/access-key",
        description=f"Access key for IAM user {username}",
        secret_object_value={
          "AWS_ACCESS_KEY_ID": SecretValue.unsafe_plain_text(
            self.access_key.access_key_id
          ),
          "AWS_SECRET_ACCESS_KEY": self.access_key.secret_access_key,
        },
        removal_policy=RemovalPolicy.DESTROY,
      )
