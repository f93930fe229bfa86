import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User
from .serializers import AuthSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


def issue_tokens(user):
    token = RefreshToken.for_user(user)
    return {
        "access_token": str(token.access_token),
        "refresh_token": str(token),
    }


class RegisterView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # 유효성 검사 통과 후 객체 생성
        user = serializer.save()
        logger.info("Registered account %s", user.pk)

        return Response(
            {
                "user": serializer.data,
                "message": "register success!",
                "token": issue_tokens(user),
            },
            status=status.HTTP_201_CREATED,
        )


class AuthView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = AuthSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']

        return Response(
            {
                "user": {
                    "id": user.pk,
                    "name": user.name,
                    "email": user.email,
                    "role": user.role,
                },
                "message": "login success!",
                "token": issue_tokens(user),
            },
            status=status.HTTP_200_OK,
        )


class UserInfoView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        user = User.objects.select_related("store").get(pk=request.user.pk)
        serializer = UserSerializer(user)
        return Response({"results": serializer.data}, status=status.HTTP_200_OK)
