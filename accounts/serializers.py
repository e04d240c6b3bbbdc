from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed

User = get_user_model()


class MeSerializer(serializers.ModelSerializer):
    """
    Payload of /api/v1/me/ and of the login answer.
    """
    name = serializers.CharField(source="display_name", read_only=True)
    station_name = serializers.CharField(source="station.name", read_only=True, default=None)

    class Meta:
        model = User
        fields = (
            "id",
            "username",
            "email",
            "name",
            "role",
            "station",
            "station_name",
        )
        read_only_fields = fields


class DemoLoginSerializer(serializers.Serializer):
    """
    Demo sign-in: the email alone selects the account, there is no password.
    """
    email = serializers.EmailField()

    def validate(self, data):
        try:
            user = User.objects.select_related("station").get(email__iexact=data["email"])
        except User.DoesNotExist:
            raise AuthenticationFailed("No account for this email.")

        if not user.is_active:
            raise AuthenticationFailed("Account is inactive.")

        data["user"] = user
        return data
