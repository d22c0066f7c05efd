import datetime
import json
from datetime import timedelta

from django.contrib import admin
from django.db.models import Count, Sum
from django.db.models.functions import TruncDate
from django.shortcuts import render
from django.utils import timezone

from apps.orders.models import Order, OrderItem
from .models import Reporte

# Ventes réelles : ni en attente de paiement ni annulées
EXCLUDED_STATUSES = [Order.STATUS_PENDING, Order.STATUS_CANCELLED]


def _parse_date(value, default):
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return default


def dashboard_stats(date_start, date_end):
    """
    Indicateurs du tableau de bord entre deux dates (incluses).
    """
    # Fin de journée incluse
    tz = timezone.get_current_timezone()
    start = datetime.datetime.combine(date_start, datetime.time.min, tzinfo=tz)
    end = datetime.datetime.combine(date_end + timedelta(days=1), datetime.time.min, tzinfo=tz)

    orders = Order.objects.filter(created_at__gte=start, created_at__lt=end)
    sales = orders.exclude(status__in=EXCLUDED_STATUSES)

    revenue = sales.aggregate(s=Sum("total"))["s"] or 0
    count = sales.count()
    customers = sales.exclude(user=None).values("user").distinct().count()

    by_status = {
        row["status"]: row["n"]
        for row in orders.values("status").annotate(n=Count("id"))
    }

    by_day = [
        {"date": row["day"].isoformat(), "revenue": float(row["revenue"] or 0)}
        for row in sales.annotate(day=TruncDate("created_at", tzinfo=tz))
        .values("day")
        .annotate(revenue=Sum("total"))
        .order_by("day")
    ]

    top_products = [
        {"name": row["product_name"], "quantity": row["quantity"], "revenue": float(row["revenue"] or 0)}
        for row in OrderItem.objects.filter(order__in=sales)
        .values("product_name")
        .annotate(quantity=Sum("quantity"), revenue=Sum("line_total"))
        .order_by("-quantity")[:10]
    ]

    return {
        "total_orders": count,
        "total_revenue": revenue,
        "total_customers": customers,
        "avg_order_value": revenue / count if count else 0,
        "orders_by_status": by_status,
        "revenue_by_day": by_day,
        "top_products": top_products,
    }


@admin.register(Reporte)
class ReporteAdmin(admin.ModelAdmin):
    def changelist_view(self, request, extra_context=None):
        # 30 derniers jours par défaut
        today = timezone.localdate()
        date_start = _parse_date(request.GET.get("start_date"), today - timedelta(days=30))
        date_end = _parse_date(request.GET.get("end_date"), today)

        stats = dashboard_stats(date_start, date_end)
        labels = dict(Order.STATUS_CHOICES)

        context = {
            **self.admin_site.each_context(request),
            "title": f"Ventes du {date_start:%d/%m/%Y} au {date_end:%d/%m/%Y}",
            "filtres": {"start": date_start.isoformat(), "end": date_end.isoformat()},
            "summary": stats,
            "chart_data": {
                "statuts_labels": json.dumps([labels.get(s, s) for s in stats["orders_by_status"]]),
                "statuts_data": json.dumps(list(stats["orders_by_status"].values())),
                "jours_labels": json.dumps([d["date"] for d in stats["revenue_by_day"]]),
                "jours_data": json.dumps([d["revenue"] for d in stats["revenue_by_day"]]),
            },
            "dernieres_commandes": Order.objects.exclude(status__in=EXCLUDED_STATUSES).order_by("-created_at")[:10],
        }

        return render(request, "admin/reports_dashboard.html", context)

    def has_add_permission(self, request): return False
    def has_change_permission(self, request, obj=None): return False
    def has_delete_permission(self, request, obj=None): return False

    def has_view_permission(self, request, obj=None):
        return request.user.is_active and request.user.is_staff
