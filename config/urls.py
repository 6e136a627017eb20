"""
URL configuration for the todo tracker.
"""
from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI

from apps.core.errors import register_exception_handlers

api = NinjaAPI(
    title="Todo Tracker API",
    version="1.0.0",
    description="Personal todo lists with session-cookie authentication",
    docs_url="/docs",
)
register_exception_handlers(api)

from apps.identity.api import router as identity_router
from apps.todos.api import router as todos_router

api.add_router("/auth/", identity_router)
api.add_router("/todos", todos_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
