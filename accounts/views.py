# accounts/views.py
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.serializers import DemoLoginSerializer, MeSerializer
from core.token import issue_tokens

logger = logging.getLogger(__name__)


class DemoLoginView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = DemoLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]

        logger.info("User %s signed in (%s)", user.username, user.role)

        return Response({
            **issue_tokens(user),
            "user": MeSerializer(user).data,
        }, status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(MeSerializer(request.user).data)
