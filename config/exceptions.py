"""
Project-wide DRF exception handler.

DRF already turns its own exceptions (validation, authentication,
permission, 404) into responses. Anything else reaching the view layer is
logged with its traceback and answered with a generic 500 body.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception(
        "Unhandled error in %s",
        view.__class__.__name__ if view is not None else 'unknown view',
    )
    return Response(
        {'error': 'Internal server error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
