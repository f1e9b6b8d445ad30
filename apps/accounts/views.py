from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema

from .serializers import (
    UserRegistrationSerializer,
    UserLoginSerializer,
    UserSerializer,
)
from .services import register_user, authenticate_user, AccountsServiceError


class TokenPairSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class SessionSerializer(serializers.Serializer):
    """Body returned by register and login."""
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokenPairSerializer()


class AuthErrorSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()


def _error_response(error: AccountsServiceError) -> Response:
    return Response(
        {'error': str(error), 'code': error.code},
        status=error.status_code
    )


def _session_response(user, message, status_code=status.HTTP_200_OK) -> Response:
    refresh = RefreshToken.for_user(user)
    return Response({
        'message': message,
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        },
    }, status=status_code)


@extend_schema(
    request=UserRegistrationSerializer,
    responses={201: SessionSerializer, 400: AuthErrorSerializer},
    description="Create an account. New users belong to no household.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    serializer = UserRegistrationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = register_user(**serializer.validated_data)
    except AccountsServiceError as e:
        return _error_response(e)

    return _session_response(user, 'Registration successful', status.HTTP_201_CREATED)


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: SessionSerializer,
        401: AuthErrorSerializer,
        403: AuthErrorSerializer,
    },
    description="Exchange email and password for a JWT pair.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(**serializer.validated_data)
    except AccountsServiceError as e:
        return _error_response(e)

    return _session_response(user, 'Login successful')


@extend_schema(
    responses={200: UserSerializer},
    description="The caller's profile with household id and role.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    return Response(UserSerializer(request.user).data)
