# core/token.py
from rest_framework_simplejwt.tokens import RefreshToken


def issue_tokens(user):
    """
    JWT pair carrying the claims the dashboard needs to scope its views.
    """
    refresh = RefreshToken.for_user(user)
    refresh["role"] = user.role
    refresh["name"] = user.display_name
    refresh["station_id"] = user.station_id

    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }
