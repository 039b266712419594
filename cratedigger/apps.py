# cratedigger/apps.py
from django.apps import AppConfig


class CrateDiggerConfig(AppConfig):
    name = "cratedigger"
    verbose_name = "Crate Digger"
