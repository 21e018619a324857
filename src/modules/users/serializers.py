"""User DRF serializers (output only).

The password hash never leaves the service layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.users.models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "role",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
