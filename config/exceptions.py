"""
Project-wide DRF exception handler.

Storage failures that escape a service surface as ``storage_failure``
instead of an HTML 500 page.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler


logger = logging.getLogger(__name__)


def exception_handler(exc, context):
    response = drf_exception_handler(exc, context)
    if response is not None:
        return response

    if isinstance(exc, DatabaseError):
        view = context.get('view')
        logger.exception(
            "Storage failure in %s",
            view.__class__.__name__ if view is not None else 'unknown view',
            exc_info=exc
        )
        return Response(
            {'error': 'Storage failure', 'code': 'storage_failure'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return None
