"""
Group management service.

Handles group CRUD operations with proper transaction safety.
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.db.models import Count, OuterRef, Prefetch, QuerySet, Subquery

from apps.accounts.models import User
from apps.groups.models import Group, GroupMember, GroupRole

from .exceptions import (
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidGroupDataError,
)

logger = logging.getLogger(__name__)


def get_membership(*, group_id: UUID, user: User) -> Tuple[Group, GroupMember]:
    """
    Load a group and the user's membership in it.

    Args:
        group_id: UUID of the group
        user: User whose membership is required

    Returns:
        tuple: (Group, GroupMember)

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    try:
        group = Group.objects.select_related('created_by').get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    try:
        membership = GroupMember.objects.get(group=group, user=user)
    except GroupMember.DoesNotExist:
        raise NotMemberError("Not a member of this group")

    return group, membership


def require_admin(*, group_id: UUID, user: User, message: str = "Only group admins can perform this action") -> Group:
    """
    Like ``get_membership`` but also requires the admin role.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is a plain member
    """
    group, membership = get_membership(group_id=group_id, user=user)
    if membership.role != GroupRole.ADMIN:
        raise InsufficientPermissionsError(message)
    return group


def list_user_groups(*, user: User) -> QuerySet[Group]:
    """
    Groups the user belongs to, newest first, annotated with
    ``member_count`` and the user's ``user_role``.
    """
    user_role = GroupMember.objects.filter(group=OuterRef('pk'), user=user).values('role')[:1]
    return (
        Group.objects
        .filter(memberships__user=user)
        .select_related('created_by')
        .annotate(
            member_count=Count('memberships', distinct=True),
            user_role=Subquery(user_role),
        )
        .order_by('-created_at')
    )


def get_group_detail(*, group_id: UUID, user: User) -> Group:
    """
    Group with members, visible to members only.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
    """
    get_membership(group_id=group_id, user=user)
    return (
        Group.objects
        .select_related('created_by')
        .prefetch_related(
            Prefetch(
                'memberships',
                queryset=GroupMember.objects.select_related('user').order_by('joined_at'),
            )
        )
        .get(id=group_id)
    )


@transaction.atomic
def create_group(
    *,
    name: str,
    created_by: User,
    description: str = '',
    avatar: str = '',
) -> Group:
    """
    Create a new group and add the creator as admin.

    Args:
        name: Group name
        created_by: User creating the group
        description: Optional group description
        avatar: Optional avatar URL

    Returns:
        Created Group instance

    Raises:
        InvalidGroupDataError: If name is blank
    """
    name = (name or '').strip()
    if not name:
        raise InvalidGroupDataError("Group name is required")

    group = Group.objects.create(
        name=name,
        description=(description or '').strip(),
        avatar=avatar or '',
        created_by=created_by,
    )
    GroupMember.objects.create(group=group, user=created_by, role=GroupRole.ADMIN)

    logger.info("Group %s created by %s", group.id, created_by.id)
    return group


@transaction.atomic
def update_group(
    *,
    group_id: UUID,
    user: User,
    name: Optional[str] = None,
    description: Optional[str] = None,
    avatar: Optional[str] = None,
    permission_message: str = "Only group admins can update the group",
) -> Group:
    """
    Update group details (admin only).

    Name and description are trimmed; a blank name is rejected.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is not admin
        InvalidGroupDataError: If name is blank
    """
    require_admin(group_id=group_id, user=user, message=permission_message)
    group = Group.objects.select_for_update().get(id=group_id)

    update_fields = ['updated_at']

    if name is not None:
        name = name.strip()
        if not name:
            raise InvalidGroupDataError("Group name is required")
        group.name = name
        update_fields.append('name')

    if description is not None:
        group.description = description.strip()
        update_fields.append('description')

    if avatar is not None:
        group.avatar = avatar
        update_fields.append('avatar')

    group.save(update_fields=update_fields)

    logger.info("Group %s updated by %s", group.id, user.id)
    return group


@transaction.atomic
def delete_group(
    *,
    group_id: UUID,
    user: User,
    permission_message: str = "Only group admins can delete the group",
) -> None:
    """
    Delete a group (admin only).

    Cascading deletes remove expense splits, expenses, invitations and
    memberships in the same transaction.

    Raises:
        GroupNotFoundError: If group doesn't exist
        NotMemberError: If user is not a member
        InsufficientPermissionsError: If user is not admin
    """
    group = require_admin(group_id=group_id, user=user, message=permission_message)
    group.delete()

    logger.info("Group %s deleted by %s", group_id, user.id)
