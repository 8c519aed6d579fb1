"""CDK constructs for IAM admin groups and users."""

from .admin_group import AdminGroup
from .admin_user import AdminUser
from .force_destroy import UserForceDestroyProvider
from .policy_attachment import ADMINISTRATOR_ACCESS_ARN, GroupPolicyAttachment

__all__ = [
  "ADMINISTRATOR_ACCESS_ARN",
  "AdminGroup",
  "AdminUser",
  "GroupPolicyAttachment",
  "UserForceDestroyProvider",
]
