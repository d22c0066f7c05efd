from django.conf import settings

from apps.cycles.views import current_status


def site_context(request):
    return {
        "SITE_NAME": getattr(settings, "SITE_NAME", "AMAP"),
        "CONTACT_EMAIL": getattr(settings, "CONTACT_EMAIL", ""),
        "SALES_STATUS": current_status(),
    }
