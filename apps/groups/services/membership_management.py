"""
Membership management service.

Handles group membership operations with concurrency protection. A group
always keeps at least one admin: removing, demoting or letting the last
admin leave is refused.
"""

import logging
from uuid import UUID

from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from apps.accounts.models import User
from apps.groups.models import GroupMember, GroupRole

from .exceptions import (
    UserNotFoundError,
    MemberNotFoundError,
    AlreadyMemberError,
    LastAdminError,
    InsufficientPermissionsError,
)
from .group_management import get_membership, require_admin

logger = logging.getLogger(__name__)


def _is_last_admin(membership: GroupMember) -> bool:
    return membership.role == GroupRole.ADMIN and membership.group.admin_count() == 1


def get_group_members(*, group_id: UUID, user: User) -> QuerySet[GroupMember]:
    """
    Members of a group in join order (members only).

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    get_membership(group_id=group_id, user=user)
    return (
        GroupMember.objects
        .filter(group_id=group_id)
        .select_related('user')
        .order_by('joined_at')
    )


@transaction.atomic
def add_member(
    *,
    group_id: UUID,
    email: str,
    added_by: User,
    role: str = GroupRole.MEMBER,
) -> GroupMember:
    """
    Add an existing user to the group by email (admin only).

    Args:
        group_id: UUID of the group
        email: Email of the user to add
        added_by: Admin performing the action
        role: Role for the new member

    Returns:
        Created GroupMember instance

    Raises:
        InsufficientPermissionsError: If added_by is not admin
        UserNotFoundError: If no user has this email
        AlreadyMemberError: If the user is already in the group
    """
    group = require_admin(group_id=group_id, user=added_by, message="Only admins can add members")

    try:
        user = User.objects.get(email__iexact=email.strip())
    except User.DoesNotExist:
        raise UserNotFoundError("User not found")

    if group.has_member(user):
        raise AlreadyMemberError("User is already a member")

    try:
        membership = GroupMember.objects.create(group=group, user=user, role=role)
    except IntegrityError:
        raise AlreadyMemberError("User is already a member")

    logger.info("User %s added to group %s by %s", user.id, group.id, added_by.id)
    return membership


@transaction.atomic
def update_member_role(
    *,
    group_id: UUID,
    user_id: UUID,
    new_role: str,
    updated_by: User,
) -> GroupMember:
    """
    Change a member's role (admin only).

    Raises:
        ValueError: If new_role is invalid
        InsufficientPermissionsError: If updated_by is not admin
        MemberNotFoundError: If target user is not a member
        LastAdminError: If this would demote the only admin
    """
    if new_role not in GroupRole.values:
        raise ValueError(f"Invalid role. Must be one of: {GroupRole.values}")

    require_admin(group_id=group_id, user=updated_by, message="Only admins can update member roles")

    try:
        membership = (
            GroupMember.objects
            .select_for_update()
            .get(group_id=group_id, user_id=user_id)
        )
    except GroupMember.DoesNotExist:
        raise MemberNotFoundError("Member not found")

    if new_role != GroupRole.ADMIN and _is_last_admin(membership):
        raise LastAdminError("Cannot demote the only admin of the group")

    membership.role = new_role
    membership.save(update_fields=['role'])

    logger.info("Member %s of group %s is now %s", user_id, group_id, new_role)
    return membership


@transaction.atomic
def remove_member(*, group_id: UUID, user_id: UUID, removed_by: User) -> None:
    """
    Remove a member. Admins may remove anyone; members only themselves.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If removed_by is not a member
        InsufficientPermissionsError: If a plain member removes someone else
        MemberNotFoundError: If target user is not a member
        LastAdminError: If the target is the only admin
    """
    _, own_membership = get_membership(group_id=group_id, user=removed_by)

    if own_membership.role != GroupRole.ADMIN and str(user_id) != str(removed_by.id):
        raise InsufficientPermissionsError("Permission denied")

    try:
        membership = (
            GroupMember.objects
            .select_for_update()
            .get(group_id=group_id, user_id=user_id)
        )
    except GroupMember.DoesNotExist:
        raise MemberNotFoundError("Member not found")

    if _is_last_admin(membership):
        raise LastAdminError("Cannot remove the only admin of the group")

    membership.delete()
    logger.info("Member %s removed from group %s by %s", user_id, group_id, removed_by.id)


@transaction.atomic
def leave_group(*, group_id: UUID, user: User) -> None:
    """
    Leave a group.

    Raises:
        MemberNotFoundError: If group doesn't exist or user is not a member
        LastAdminError: If user is the only admin
    """
    try:
        membership = (
            GroupMember.objects
            .select_for_update()
            .get(group_id=group_id, user=user)
        )
    except GroupMember.DoesNotExist:
        raise MemberNotFoundError("You are not a member of this group")

    if _is_last_admin(membership):
        raise LastAdminError(
            "You are the only admin. Promote another member before leaving the group."
        )

    membership.delete()
    logger.info("User %s left group %s", user.id, group_id)
