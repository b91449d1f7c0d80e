"""
URL configuration for the dexterhub project.

Every JSON endpoint lives under /api/; each app owns its own urls module.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("apps.core.urls")),
    path("api/auth/", include("apps.accounts.urls", namespace="accounts")),
    path("api/", include("apps.learn.urls", namespace="learn")),
    path("api/", include("apps.reviews.urls", namespace="reviews")),
    path("api/", include("apps.audit.urls", namespace="audit")),
]
