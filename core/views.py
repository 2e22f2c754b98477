import logging
import time

from django.conf import settings
from django.db import connections, DatabaseError
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework import status

logger = logging.getLogger("framety.core")


class HealthCheckView(APIView):
    """
    GET /api/health/

    Public probe for the hosting platform. Runs a trivial query against
    the default database and answers 503 when the store is unreachable.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        started = time.perf_counter()

        try:
            with connections["default"].cursor() as cursor:
                cursor.execute("SELECT 1")
            db_ok = True
        except DatabaseError as exc:
            logger.error("Health check could not reach the database: %s", exc)
            db_ok = False

        payload = {
            "status": "ok" if db_ok else "degraded",
            "db": db_ok,
            "env": getattr(settings, "ENV", "unknown"),
            "latency_ms": int((time.perf_counter() - started) * 1000),
        }
        return Response(
            payload,
            status=status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
        )
