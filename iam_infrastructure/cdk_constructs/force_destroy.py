"""Custom Resource provider that clears IAM users before deletion."""

from aws_cdk import Duration
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as lambda_
from aws_cdk import custom_resources as cr
from constructs import Construct


class UserForceDestroyProvider(Construct):
  """Shared provider for per-user force-destroy custom resources.

  CloudFormation refuses to delete an IAM user that still owns access keys,
  a login profile, MFA devices, certificates, SSH keys, policies or group
  memberships created outside the stack. Each AdminUser registers one
  custom resource against this provider; when that resource is deleted
  (which happens just before the user itself) the handler removes every
  such leftover so the user deletion goes through.
  """

  def __init__(
    self,
    scope: Construct,
    id: str,
  ) -> None:
    super().__init__(scope, id)

    self.handler = lambda_.Function(
      self,
      "Handler",
      runtime=lambda_.Runtime.PYTHON_3_12,
      handler="index.handler",
      code=lambda_.Code.from_inline(self._get_handler_code()),
      timeout=Duration.seconds(120),
    )

    self.handler.add_to_role_policy(
      iam.PolicyStatement(
        actions=[
          "iam:ListAccessKeys",
          "iam:DeleteAccessKey",
          "iam:DeleteLoginProfile",
          "iam:ListMFADevices",
          "iam:DeactivateMFADevice",
          "iam:ListSigningCertificates",
          "iam:DeleteSigningCertificate",
          "iam:ListSSHPublicKeys",
          "iam:DeleteSSHPublicKey",
          "iam:ListServiceSpecificCredentials",
          "iam:DeleteServiceSpecificCredential",
          "iam:ListAttachedUserPolicies",
          "iam:DetachUserPolicy",
          "iam:ListUserPolicies",
          "iam:DeleteUserPolicy",
          "iam:ListGroupsForUser",
          "iam:RemoveUserFromGroup",
        ],
        resources=["*"],
      )
    )

    provider = cr.Provider(
      self,
      "Provider",
      on_event_handler=self.handler,
    )
    self.service_token = provider.service_token

  def _get_handler_code(self) -> str:
    return """
import boto3

iam = boto3.client("iam")


def _ignore_missing(call, **kwargs):
    try:
        call(**kwargs)
    except iam.exceptions.NoSuchEntityException:
        pass


def _pages(operation, key, **kwargs):
    for page in iam.get_paginator(operation).paginate(**kwargs):
        yield from page[key]


def purge_user(user_name):
    for key in _pages("list_access_keys", "AccessKeyMetadata", UserName=user_name):
        print(f"Deleting access key {key['AccessKeyId']}")
        _ignore_missing(iam.delete_access_key, UserName=user_name, AccessKeyId=key["AccessKeyId"])

    _ignore_missing(iam.delete_login_profile, UserName=user_name)

    for device in _pages("list_mfa_devices", "MFADevices", UserName=user_name):
        print(f"Deactivating MFA device {device['SerialNumber']}")
        _ignore_missing(iam.deactivate_mfa_device, UserName=user_name, SerialNumber=device["SerialNumber"])

    for cert in _pages("list_signing_certificates", "Certificates", UserName=user_name):
        _ignore_missing(iam.delete_signing_certificate, UserName=user_name, CertificateId=cert["CertificateId"])

    for ssh_key in _pages("list_ssh_public_keys", "SSHPublicKeys", UserName=user_name):
        _ignore_missing(iam.delete_ssh_public_key, UserName=user_name, SSHPublicKeyId=ssh_key["SSHPublicKeyId"])

    creds = iam.list_service_specific_credentials(UserName=user_name)
    for cred in creds.get("ServiceSpecificCredentials", []):
        _ignore_missing(
            iam.delete_service_specific_credential,
            UserName=user_name,
            ServiceSpecificCredentialId=cred["ServiceSpecificCredentialId"],
        )

    for policy in _pages("list_attached_user_policies", "AttachedPolicies", UserName=user_name):
        print(f"Detaching policy {policy['PolicyArn']}")
        _ignore_missing(iam.detach_user_policy, UserName=user_name, PolicyArn=policy["PolicyArn"])

    for policy_name in _pages("list_user_policies", "PolicyNames", UserName=user_name):
        _ignore_missing(iam.delete_user_policy, UserName=user_name, PolicyName=policy_name)

    for group in _pages("list_groups_for_user", "Groups", UserName=user_name):
        print(f"Removing {user_name} from group {group['GroupName']}")
        _ignore_missing(iam.remove_user_from_group, GroupName=group["GroupName"], UserName=user_name)


def handler(event, context):
    request_type = event["RequestType"]
    user_name = event["ResourceProperties"]["UserName"]

    if request_type == "Delete":
        try:
            purge_user(user_name)
        except iam.exceptions.NoSuchEntityException:
            print(f"User {user_name} already gone")

    return {"PhysicalResourceId": f"{user_name}-force-destroy"}
"""
