"""User API views.

Account administration over ``UserService``.  There is no login here;
orders only need an existing user id.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.filters import SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.dtos import drop_nulls, parse_dto
from modules.users.dtos import CreateUserDTO, UpdateUserDTO
from modules.users.filters import UserFilter
from modules.users.models import User
from modules.users.repositories.django_repository import UserDjangoRepository
from modules.users.serializers import UserSerializer
from modules.users.services import UserService


class UserViewSet(GenericViewSet):
    filterset_class = UserFilter
    search_fields = ["name", "email"]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    queryset = User.objects.all()
    serializer_class = UserSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = UserService(repository=UserDjangoRepository())

    def get_queryset(self):
        return self._service.list_users()

    def list(self, request: Request) -> Response:
        """GET /api/v1/users/?role=&email=&search="""
        users = self.filter_queryset(self.get_queryset())
        data = UserSerializer(users, many=True).data
        return Response({"results": data, "count": len(data)})

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        return Response(UserSerializer(self._service.get_user(pk)).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/users/ with ``{"email", "name", "password", "role"}``."""
        dto = parse_dto(CreateUserDTO, drop_nulls(request.data))
        user = self._service.create_user(dto)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/users/{pk}/ (partial in both cases)."""
        dto = parse_dto(UpdateUserDTO, drop_nulls(request.data))
        user = self._service.update_user(pk, dto)
        return Response(UserSerializer(user).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        self._service.delete_user(pk)
        return Response({"detail": "User deleted successfully."})
