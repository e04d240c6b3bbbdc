# expanse/urls.py
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.views import DemoLoginView, MeView

app_name = "expanse"


urlpatterns = [
    path("api/v1/dashboard/", include("dashboard.urls")),

    path("api/v1/stations/", include("stations.urls")),
    path("api/v1/entries/", include("entries.urls")),
    path("api/v1/alerts/", include("alerts.urls")),

    path("api/v1/me/", MeView.as_view(), name="me"),

    path("api/v1/auth/login/", DemoLoginView.as_view(), name="login"),
    path("api/v1/auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    path('api/schema/', SpectacularAPIView.as_view(), name='openapi-schema'),

    path(
        'api/docs/',
        SpectacularSwaggerView.as_view(url='/api/schema/'),
        name='swagger-ui'
    ),

    path("admin/", admin.site.urls),
]
