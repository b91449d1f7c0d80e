# apps/accounts/views/auth.py
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..serializers import UserSerializer, RegisterSerializer, LoginSerializer
from ..services import register_user, login_user


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    serializer = RegisterSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    user, token = register_user(
        email=data['email'],
        password=data['password'],
        role=data['role'],
        first_name=data['firstName'],
        last_name=data['lastName'],
    )
    return Response({"user": UserSerializer(user).data, "token": token}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
@ratelimit(key='ip', rate='5/m', method='POST')  # 5 attempts per minute
def login(request):
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = login_user(request=request._request, **serializer.validated_data)
    if result is None:
        return Response({"error": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

    user, token = result
    return Response({"user": UserSerializer(user).data, "token": token})


@api_view(["GET"])
def me(request):
    return Response({"user": UserSerializer(request.user).data})
