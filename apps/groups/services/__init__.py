"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    InvalidGroupDataError,
    UserNotFoundError,
    MemberNotFoundError,
    AlreadyMemberError,
    LastAdminError,
    AlreadyInvitedError,
    InvitationNotFoundError,
    InvitationExpiredError,
    InvitationAlreadyAcceptedError,
    InvitationEmailMismatchError,
    ExpenseNotFoundError,
    InvalidExpenseError,
)

from .group_management import (
    get_membership,
    require_admin,
    list_user_groups,
    get_group_detail,
    create_group,
    update_group,
    delete_group,
)

from .membership_management import (
    get_group_members,
    add_member,
    update_member_role,
    remove_member,
    leave_group,
)

from .invitation_management import (
    build_invite_link,
    send_invitation,
    list_pending_invitations,
    get_open_invitation,
    accept_invitation,
)

from .expense_management import (
    list_expenses,
    get_expense,
    create_expense,
    update_expense,
    delete_expense,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'NotMemberError',
    'InsufficientPermissionsError',
    'InvalidGroupDataError',
    'UserNotFoundError',
    'MemberNotFoundError',
    'AlreadyMemberError',
    'LastAdminError',
    'AlreadyInvitedError',
    'InvitationNotFoundError',
    'InvitationExpiredError',
    'InvitationAlreadyAcceptedError',
    'InvitationEmailMismatchError',
    'ExpenseNotFoundError',
    'InvalidExpenseError',

    # Group Management
    'get_membership',
    'require_admin',
    'list_user_groups',
    'get_group_detail',
    'create_group',
    'update_group',
    'delete_group',

    # Membership Management
    'get_group_members',
    'add_member',
    'update_member_role',
    'remove_member',
    'leave_group',

    # Invitations
    'build_invite_link',
    'send_invitation',
    'list_pending_invitations',
    'get_open_invitation',
    'accept_invitation',

    # Expenses
    'list_expenses',
    'get_expense',
    'create_expense',
    'update_expense',
    'delete_expense',
]
