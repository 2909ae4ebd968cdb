"""Django app configuration for django-asset-renderer."""

from django.apps import AppConfig


class AssetRendererConfig(AppConfig):
    name = "asset_renderer"
    default_auto_field = "django.db.models.BigAutoField"
    verbose_name = "Asset Renderer"
