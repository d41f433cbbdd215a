"""
Invitation management service.

Members invite people by email. Each invitation carries a random 64-hex
token, expires after ``INVITATION_EXPIRY_DAYS`` and can be redeemed once,
only by the account whose email it was sent to.
"""

import logging
from uuid import UUID

from django.conf import settings
from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import GroupMember, GroupRole, Invitation

from .exceptions import (
    AlreadyMemberError,
    AlreadyInvitedError,
    InvitationNotFoundError,
    InvitationExpiredError,
    InvitationAlreadyAcceptedError,
    InvitationEmailMismatchError,
)
from .group_management import get_membership

logger = logging.getLogger(__name__)


def build_invite_link(token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/groups/join/{token}"


@transaction.atomic
def send_invitation(*, group_id: UUID, email: str, invited_by: User) -> Invitation:
    """
    Invite an email address to the group (members only).

    Args:
        group_id: UUID of the group
        email: Address to invite
        invited_by: Member sending the invitation

    Returns:
        Created Invitation

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If invited_by is not a member
        AlreadyMemberError: If the email belongs to a member
        AlreadyInvitedError: If an unaccepted invitation exists
    """
    group, _ = get_membership(group_id=group_id, user=invited_by)
    email = email.strip()

    if GroupMember.objects.filter(group=group, user__email__iexact=email).exists():
        raise AlreadyMemberError("User is already a member of this group")

    if Invitation.objects.filter(group=group, email__iexact=email, accepted=False).exists():
        raise AlreadyInvitedError("Invitation already sent to this email")

    invitation = Invitation.objects.create(group=group, invited_by=invited_by, email=email)

    logger.info("Invitation %s to group %s sent by %s", invitation.id, group.id, invited_by.id)
    return invitation


def list_pending_invitations(*, group_id: UUID, user: User) -> QuerySet[Invitation]:
    """Unaccepted invitations of a group, newest first (members only)."""
    get_membership(group_id=group_id, user=user)
    return (
        Invitation.objects
        .filter(group_id=group_id, accepted=False)
        .select_related('invited_by')
        .order_by('-created_at')
    )


def get_open_invitation(*, token: str) -> Invitation:
    """
    Look up an invitation that can still be redeemed.

    Raises:
        InvitationNotFoundError: If no invitation has this token
        InvitationExpiredError: If it expired
        InvitationAlreadyAcceptedError: If it was already used
    """
    try:
        invitation = (
            Invitation.objects
            .select_related('group', 'invited_by')
            .get(token=token)
        )
    except Invitation.DoesNotExist:
        raise InvitationNotFoundError("Invalid invitation token")

    if invitation.is_expired:
        raise InvitationExpiredError("Invitation has expired")

    if invitation.accepted:
        raise InvitationAlreadyAcceptedError("Invitation has already been accepted")

    return invitation


@transaction.atomic
def accept_invitation(*, token: str, user: User) -> GroupMember:
    """
    Redeem an invitation: add user as member and mark it accepted.

    Raises:
        InvitationNotFoundError: If no invitation has this token
        InvitationExpiredError: If it expired
        InvitationAlreadyAcceptedError: If it was already used
        InvitationEmailMismatchError: If user's email differs from the invited one
        AlreadyMemberError: If user is already a member
    """
    invitation = get_open_invitation(token=token)
    invitation = Invitation.objects.select_for_update().select_related('group').get(pk=invitation.pk)

    # Another request may have redeemed it between the read and the lock
    if invitation.accepted:
        raise InvitationAlreadyAcceptedError("Invitation has already been accepted")

    if invitation.email.lower() != user.email.lower():
        raise InvitationEmailMismatchError("This invitation was sent to a different email address")

    if GroupMember.objects.filter(group=invitation.group, user=user).exists():
        raise AlreadyMemberError("You are already a member of this group")

    try:
        membership = GroupMember.objects.create(
            group=invitation.group,
            user=user,
            role=GroupRole.MEMBER,
        )
    except IntegrityError:
        raise AlreadyMemberError("You are already a member of this group")

    invitation.accepted = True
    invitation.save(update_fields=['accepted'])

    logger.info("Invitation %s accepted by %s", invitation.id, user.id)
    return membership
