import logging

from django.apps import apps
from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

logger = logging.getLogger(__name__)


def auto_register_models():
    """
    Gives every model that has no hand-written admin a generic one with
    import/export, so nothing stored by the marketplace is hidden from staff.
    """
    registered = 0
    for model in apps.get_models():
        if admin.site.is_registered(model):
            continue

        admin_class = type(
            f'{model.__name__}AutoAdmin',
            (ImportExportModelAdmin,),
            {'list_display': [field.name for field in model._meta.fields][:8]},
        )
        try:
            admin.site.register(model, admin_class)
        except admin.sites.AlreadyRegistered:
            continue
        registered += 1

    logger.debug("Auto-registered %d models with the admin.", registered)
    return registered
