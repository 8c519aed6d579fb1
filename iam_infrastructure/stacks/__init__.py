"""CDK stacks for per-environment IAM admins."""

from .iam_admins_stack import IamAdminsStack

__all__ = ["IamAdminsStack"]
