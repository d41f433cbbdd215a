from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    FriendSerializer,
    FriendRequestSerializer,
    UserSearchResultSerializer,
    AddFriendSerializer,
    RespondFriendRequestSerializer,
    SearchQuerySerializer,
    FriendDetailSerializer,
)

from apps.friends.services import (
    send_friend_request,
    get_pending_requests,
    respond_to_friend_request,
    get_friends,
    search_users,
    get_friend_detail,
    # Exceptions
    UserNotFoundError,
    InvalidFriendRequestError,
    FriendRequestNotFoundError,
    FriendNotFoundError,
    SearchQueryTooShortError,
)


@extend_schema(
    responses={200: FriendSerializer(many=True)},
    description="List accepted friends of the current user.",
    tags=['friends'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def friend_list(request):
    """Get all accepted friends."""
    friends = get_friends(user=request.user)
    return Response({'friends': FriendSerializer(friends, many=True).data})


@extend_schema(
    request=AddFriendSerializer,
    description="Send a friend request.",
    tags=['friends'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def add_friend(request):
    """Send a friend request to another user."""
    serializer = AddFriendSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Friend ID is required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        send_friend_request(
            user=request.user,
            friend_id=serializer.validated_data['friend_id'],
        )
    except InvalidFriendRequestError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except UserNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(
        {'message': 'Friend request sent successfully'},
        status=status.HTTP_201_CREATED
    )


@extend_schema(
    methods=['GET'],
    responses={200: FriendRequestSerializer(many=True)},
    description="List pending friend requests addressed to the current user.",
    tags=['friends'],
)
@extend_schema(
    methods=['PUT'],
    request=RespondFriendRequestSerializer,
    description="Accept or reject a pending friend request.",
    tags=['friends'],
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def friend_requests(request):
    """List or answer pending friend requests."""
    if request.method == 'GET':
        pending = get_pending_requests(user=request.user)
        return Response({'requests': FriendRequestSerializer(pending, many=True).data})

    serializer = RespondFriendRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Invalid request parameters'},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        action = respond_to_friend_request(
            user=request.user,
            friendship_id=serializer.validated_data['friendship_id'],
            action=serializer.validated_data['action'],
        )
    except FriendRequestNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    message = 'Friend request accepted' if action == 'accept' else 'Friend request rejected'
    return Response({'message': message})


@extend_schema(
    parameters=[OpenApiParameter('q', str, description='Name or username fragment (min 2 chars)')],
    responses={200: UserSearchResultSerializer(many=True)},
    description="Search users to add as friends.",
    tags=['friends'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def search(request):
    """Search users by name or username."""
    params = SearchQuerySerializer(data=request.query_params)
    params.is_valid(raise_exception=True)

    try:
        users = search_users(user=request.user, query=params.validated_data['q'])
    except SearchQueryTooShortError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'users': UserSearchResultSerializer(users, many=True).data})


@extend_schema(
    responses={200: FriendDetailSerializer},
    description="Balance summary and shared bill history with a friend.",
    tags=['friends'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def friend_detail(request, username):
    """Get a friend's profile, balance and bill history."""
    try:
        detail = get_friend_detail(user=request.user, username=username)
    except FriendNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({'friend': FriendDetailSerializer(detail).data})
