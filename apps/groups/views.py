from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    GroupSerializer,
    GroupCreateSerializer,
    GroupUpdateSerializer,
    GroupSettingsSerializer,
    GroupListSerializer,
    GroupMemberSerializer,
    AddMemberSerializer,
    UpdateMemberRoleSerializer,
    InvitationCreateSerializer,
    InvitationSerializer,
    InvitationDetailsSerializer,
    TokenSerializer,
    ExpenseInputSerializer,
    ExpenseSerializer,
)

from apps.groups.services import (
    require_admin,
    list_user_groups,
    get_group_detail,
    create_group,
    update_group,
    delete_group,
    get_group_members,
    add_member,
    update_member_role,
    remove_member,
    leave_group,
    build_invite_link,
    send_invitation,
    list_pending_invitations,
    get_open_invitation,
    accept_invitation,
    list_expenses,
    get_expense,
    create_expense,
    update_expense,
    delete_expense,
    # Exceptions
    GroupsServiceError,
    GroupNotFoundError,
    NotMemberError,
    InsufficientPermissionsError,
    UserNotFoundError,
    MemberNotFoundError,
    AlreadyMemberError,
    AlreadyInvitedError,
    InvitationNotFoundError,
    InvitationExpiredError,
    InvitationAlreadyAcceptedError,
    InvitationEmailMismatchError,
    ExpenseNotFoundError,
)

SETTINGS_PERMISSION_MESSAGE = "Only group admins can modify group settings"

_NOT_FOUND = (
    GroupNotFoundError,
    UserNotFoundError,
    MemberNotFoundError,
    InvitationNotFoundError,
    ExpenseNotFoundError,
)
_FORBIDDEN = (NotMemberError, InsufficientPermissionsError, InvitationEmailMismatchError)
_CONFLICT = (AlreadyMemberError, AlreadyInvitedError, InvitationAlreadyAcceptedError)


def _error_response(error):
    """Map a groups service error onto an HTTP response."""
    if isinstance(error, _NOT_FOUND):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, _FORBIDDEN):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, _CONFLICT):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, InvitationExpiredError):
        code = status.HTTP_410_GONE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


class GroupViewSet(viewsets.ViewSet):
    """
    Groups, their members, invitations and expenses.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all groups (user is member of)
    create: Create a new group
    retrieve: Get a specific group with members (members only)
    update: Update a group (admin only)
    destroy: Delete a group (admin only)
    """

    permission_classes = [IsAuthenticated]
    lookup_value_regex = '[0-9a-f-]{36}'

    @extend_schema(responses={200: GroupListSerializer(many=True)})
    def list(self, request):
        """Get all groups where user is a member."""
        groups = list_user_groups(user=request.user)
        return Response({'groups': GroupListSerializer(groups, many=True).data})

    @extend_schema(request=GroupCreateSerializer, responses={201: GroupSerializer})
    def create(self, request):
        """Create a new group; the creator becomes its admin."""
        serializer = GroupCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            group = create_group(created_by=request.user, **serializer.validated_data)
        except GroupsServiceError as e:
            return _error_response(e)

        group = get_group_detail(group_id=group.id, user=request.user)
        return Response(
            {
                'message': 'Group created successfully',
                'group': GroupSerializer(group, context={'request': request}).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses={200: GroupSerializer})
    def retrieve(self, request, pk=None):
        try:
            group = get_group_detail(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _error_response(e)
        return Response({'group': GroupSerializer(group, context={'request': request}).data})

    @extend_schema(request=GroupUpdateSerializer, responses={200: GroupSerializer})
    def update(self, request, pk=None):
        """Update name, description or avatar (admin only)."""
        serializer = GroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            update_group(group_id=pk, user=request.user, **serializer.validated_data)
            group = get_group_detail(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _error_response(e)

        return Response({
            'message': 'Group updated successfully',
            'group': GroupSerializer(group, context={'request': request}).data,
        })

    def destroy(self, request, pk=None):
        """Delete a group and everything in it (admin only)."""
        try:
            delete_group(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _error_response(e)
        return Response({'message': 'Group deleted successfully'})

    @extend_schema(methods=['PUT'], request=GroupSettingsSerializer, responses={200: GroupSerializer})
    @action(detail=True, methods=['put', 'delete'], url_path='settings', url_name='settings')
    def group_settings(self, request, pk=None):
        """
        PUT: Rename / re-describe the group.
        DELETE: Delete the group.

        Admin only.
        """
        try:
            require_admin(group_id=pk, user=request.user, message=SETTINGS_PERMISSION_MESSAGE)
        except GroupsServiceError as e:
            return _error_response(e)

        if request.method == 'DELETE':
            try:
                delete_group(group_id=pk, user=request.user, permission_message=SETTINGS_PERMISSION_MESSAGE)
            except GroupsServiceError as e:
                return _error_response(e)
            return Response({'message': 'Group deleted successfully'})

        serializer = GroupSettingsSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Group name is required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            group = update_group(
                group_id=pk,
                user=request.user,
                permission_message=SETTINGS_PERMISSION_MESSAGE,
                **serializer.validated_data,
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response({
            'message': 'Group settings updated successfully',
            'group': {
                'id': group.id,
                'name': group.name,
                'description': group.description,
                'updated_at': group.updated_at,
            },
        })

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    @extend_schema(methods=['POST'], request=AddMemberSerializer, responses={201: GroupMemberSerializer})
    @action(detail=True, methods=['get', 'post'])
    def members(self, request, pk=None):
        """
        GET: List members (members only).
        POST: Add an existing user by email (admin only).
        """
        if request.method == 'GET':
            try:
                memberships = get_group_members(group_id=pk, user=request.user)
            except GroupsServiceError as e:
                return _error_response(e)
            return Response({'members': GroupMemberSerializer(memberships, many=True).data})

        serializer = AddMemberSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = add_member(
                group_id=pk,
                email=serializer.validated_data['email'],
                role=serializer.validated_data['role'],
                added_by=request.user,
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response(
            {
                'message': 'Member added successfully',
                'member': GroupMemberSerializer(membership).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(methods=['PUT'], request=UpdateMemberRoleSerializer, responses={200: GroupMemberSerializer})
    @action(
        detail=True,
        methods=['put', 'delete'],
        url_path=r'members/(?P<member_id>[0-9a-f-]{36})',
        url_name='member-detail',
    )
    def member_detail(self, request, pk=None, member_id=None):
        """
        PUT: Change a member's role (admin only).
        DELETE: Remove a member (admin, or the member themselves).
        """
        if request.method == 'DELETE':
            try:
                remove_member(group_id=pk, user_id=member_id, removed_by=request.user)
            except GroupsServiceError as e:
                return _error_response(e)
            return Response({'message': 'Member removed successfully'})

        serializer = UpdateMemberRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            membership = update_member_role(
                group_id=pk,
                user_id=member_id,
                new_role=serializer.validated_data['role'],
                updated_by=request.user,
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response({
            'message': 'Member role updated successfully',
            'member': GroupMemberSerializer(membership).data,
        })

    @action(detail=True, methods=['delete'])
    def leave(self, request, pk=None):
        """Leave a group."""
        try:
            leave_group(group_id=pk, user=request.user)
        except GroupsServiceError as e:
            return _error_response(e)
        return Response({'message': 'Successfully left the group'})

    # -------------------------------------------------------------------------
    # Invitations
    # -------------------------------------------------------------------------

    @extend_schema(methods=['POST'], request=InvitationCreateSerializer, responses={201: InvitationSerializer})
    @action(detail=True, methods=['get', 'post'])
    def invitations(self, request, pk=None):
        """
        GET: Pending invitations.
        POST: Invite an email address. Returns the join link.
        """
        if request.method == 'GET':
            try:
                pending = list_pending_invitations(group_id=pk, user=request.user)
            except GroupsServiceError as e:
                return _error_response(e)
            return Response({'invitations': InvitationSerializer(pending, many=True).data})

        serializer = InvitationCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({'error': 'Email is required'}, status=status.HTTP_400_BAD_REQUEST)

        try:
            invitation = send_invitation(
                group_id=pk,
                email=serializer.validated_data['email'],
                invited_by=request.user,
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response(
            {
                'message': 'Invitation sent successfully',
                'invitation': InvitationSerializer(invitation).data,
                'invite_link': build_invite_link(invitation.token),
            },
            status=status.HTTP_201_CREATED,
        )

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    @extend_schema(methods=['POST'], request=ExpenseInputSerializer, responses={201: ExpenseSerializer})
    @action(detail=True, methods=['get', 'post'])
    def expenses(self, request, pk=None):
        """
        GET: Group expenses, newest first.
        POST: Record an expense paid by the current user.
        """
        if request.method == 'GET':
            try:
                expenses = list_expenses(group_id=pk, user=request.user)
            except GroupsServiceError as e:
                return _error_response(e)
            return Response({'expenses': ExpenseSerializer(expenses, many=True).data})

        serializer = ExpenseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.setdefault('splits', [])

        try:
            expense = create_expense(group_id=pk, paid_by=request.user, **data)
        except GroupsServiceError as e:
            return _error_response(e)

        return Response(
            {
                'message': 'Expense created successfully',
                'expense': ExpenseSerializer(expense).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(methods=['PUT'], request=ExpenseInputSerializer, responses={200: ExpenseSerializer})
    @action(
        detail=True,
        methods=['get', 'put', 'delete'],
        url_path=r'expenses/(?P<expense_id>[0-9a-f-]{36})',
        url_name='expense-detail',
    )
    def expense_detail(self, request, pk=None, expense_id=None):
        """
        GET: Expense with splits.
        PUT: Replace the expense (payer only).
        DELETE: Delete the expense (payer only).
        """
        try:
            if request.method == 'GET':
                expense = get_expense(group_id=pk, expense_id=expense_id, user=request.user)
                return Response({'expense': ExpenseSerializer(expense).data})

            if request.method == 'DELETE':
                delete_expense(group_id=pk, expense_id=expense_id, user=request.user)
                return Response({'message': 'Expense deleted successfully'})

            serializer = ExpenseInputSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            expense = update_expense(
                group_id=pk,
                expense_id=expense_id,
                user=request.user,
                **serializer.validated_data,
            )
        except GroupsServiceError as e:
            return _error_response(e)

        return Response({
            'message': 'Expense updated successfully',
            'expense': ExpenseSerializer(expense).data,
        })


@extend_schema(
    parameters=[OpenApiParameter(name='token', type=str, required=True)],
    responses={200: InvitationDetailsSerializer},
    description="Preview an invitation before joining. No authentication required.",
    tags=['groups'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def invitation_details(request):
    """Group name, description and inviter for an open invitation token."""
    token = request.query_params.get('token')
    if not token:
        return Response({'error': 'Token is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        invitation = get_open_invitation(token=token)
    except GroupsServiceError as e:
        return _error_response(e)

    return Response(InvitationDetailsSerializer(invitation).data)


@extend_schema(
    request=TokenSerializer,
    responses={200: GroupMemberSerializer},
    description="Join a group with an invitation token.",
    tags=['groups'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def join_group(request):
    """Redeem an invitation token."""
    serializer = TokenSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Invitation token is required'}, status=status.HTTP_400_BAD_REQUEST)

    try:
        membership = accept_invitation(token=serializer.validated_data['token'], user=request.user)
    except GroupsServiceError as e:
        return _error_response(e)

    group = membership.group
    return Response({
        'message': 'Successfully joined the group',
        'group': {
            'id': group.id,
            'name': group.name,
            'description': group.description,
        },
        'member': GroupMemberSerializer(membership).data,
    })
