import django_filters

from modules.users.models import User, UserRole


class UserFilter(django_filters.FilterSet):
    email = django_filters.CharFilter(field_name="email", lookup_expr="iexact")
    role = django_filters.ChoiceFilter(field_name="role", choices=UserRole.choices)

    class Meta:
        model = User
        fields = ["email", "role"]
