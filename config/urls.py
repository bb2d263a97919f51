"""URL configuration for the care booking project.

Only the Django admin is routed here; HTTP APIs for bookings live in the
surrounding web application.
"""
from django.contrib import admin  # type: ignore
from django.urls import path  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
]
