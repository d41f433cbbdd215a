from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from .serializers import (
    PaymentRequestSerializer,
    PaymentRequestCreateSerializer,
    PaymentRequestUpdateSerializer,
    PaymentRequestQuerySerializer,
)
from .services import (
    list_payment_requests,
    get_payment_request,
    create_payment_request,
    update_payment_request,
    cancel_payment_request,
    perform_action,
)
from .exceptions import (
    PaymentsServiceError,
    PaymentRequestNotFoundError,
    NotParticipantError,
    WrongActorError,
)


def _error_response(error):
    """Map a payments service error onto an HTTP response."""
    if isinstance(error, PaymentRequestNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, (NotParticipantError, WrongActorError)):
        code = status.HTTP_403_FORBIDDEN
    else:
        code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(error)}, status=code)


@extend_schema(
    parameters=[
        OpenApiParameter(name='status', type=str, required=False),
        OpenApiParameter(name='type', type=str, required=False, enum=['incoming', 'outgoing']),
    ],
    request=PaymentRequestCreateSerializer,
    responses={200: PaymentRequestSerializer(many=True), 201: PaymentRequestSerializer},
    tags=['payments'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payment_requests(request):
    """
    GET: Payment requests the user is part of.
    POST: Ask another user to pay you.
    """
    if request.method == 'GET':
        query = PaymentRequestQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        queryset = list_payment_requests(
            user=request.user,
            status=query.validated_data.get('status'),
            request_type=query.validated_data.get('type'),
        )
        serializer = PaymentRequestSerializer(queryset, many=True, context={'request': request})
        return Response({'requests': serializer.data})

    serializer = PaymentRequestCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            {'error': 'Payer ID and amount are required', 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        payment_request = create_payment_request(payee=request.user, **serializer.validated_data)
    except PaymentsServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Payment request created successfully',
        'request': PaymentRequestSerializer(payment_request, context={'request': request}).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(
    request=PaymentRequestUpdateSerializer,
    responses={200: PaymentRequestSerializer},
    tags=['payments'],
)
@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payment_request_detail(request, pk):
    """
    GET: Request details (participants only).
    PUT/PATCH: Update status, notes or payment method.
    DELETE: Cancel the request.
    """
    try:
        if request.method == 'GET':
            payment_request = get_payment_request(user=request.user, request_id=pk)
            return Response({
                'request': PaymentRequestSerializer(payment_request, context={'request': request}).data,
            })

        if request.method == 'DELETE':
            cancel_payment_request(user=request.user, request_id=pk)
            return Response({'message': 'Payment request cancelled successfully'})

        serializer = PaymentRequestUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payment_request = update_payment_request(
            user=request.user,
            request_id=pk,
            **serializer.validated_data,
        )
    except PaymentsServiceError as e:
        return _error_response(e)

    return Response({
        'message': 'Payment request updated successfully',
        'request': PaymentRequestSerializer(payment_request, context={'request': request}).data,
    })


def _run_action(request, pk, action_name, message):
    try:
        payment_request = perform_action(user=request.user, request_id=pk, action=action_name)
    except PaymentsServiceError as e:
        return _error_response(e)

    return Response({
        'message': message,
        'request': PaymentRequestSerializer(payment_request, context={'request': request}).data,
    })


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def accept_request(request, pk):
    """Payer agrees to pay."""
    return _run_action(request, pk, 'accept', 'Payment request accepted')


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def reject_request(request, pk):
    """Payer declines the request."""
    return _run_action(request, pk, 'reject', 'Payment request rejected')


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_paid(request, pk):
    """Payer reports the money as sent; the payee still has to confirm."""
    return _run_action(request, pk, 'mark_paid', 'Payment marked as paid')


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def confirm_payment(request, pk):
    """Payee confirms receipt."""
    return _run_action(request, pk, 'confirm', 'Payment confirmed')


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def dispute_payment(request, pk):
    return _run_action(request, pk, 'dispute', 'Payment disputed')


@extend_schema(request=None, responses={200: PaymentRequestSerializer}, tags=['payments'])
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_reminder(request, pk):
    """Payee nudges the payer."""
    return _run_action(request, pk, 'remind', 'Reminder sent')
