from decimal import Decimal, InvalidOperation

from django.core.paginator import Paginator
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_http_methods

from .models import Category, Product

SORT_MAP = {
    "name_asc": "name",
    "name_desc": "-name",
    "price_asc": "price",
    "price_desc": "-price",
    "newest": "-created_at",
}


def _safe_decimal(v, default=None):
    if v is None or v == "":
        return default
    try:
        return Decimal(str(v))
    except (InvalidOperation, ValueError):
        return default


def product_payload(product):
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": str(product.price),
        "unit": product.unit,
        "imageUrl": product.image_url or None,
        "stock": product.stock,
        "isAvailable": product.is_available,
        "inStock": product.in_stock,
        "weightGrams": product.weight_grams,
        "category": product.category.name if product.category else None,
    }


@require_http_methods(["GET"])
def product_list(request):
    q = (request.GET.get("q") or "").strip()
    category = (request.GET.get("category") or "").strip()
    min_price = _safe_decimal(request.GET.get("min"))
    max_price = _safe_decimal(request.GET.get("max"))
    in_stock = request.GET.get("in_stock") == "1"
    sort = (request.GET.get("sort") or "name_asc").strip()

    products = Product.objects.filter(is_available=True).select_related("category")

    if q:
        products = products.filter(
            Q(name__icontains=q) |
            Q(description__icontains=q)
        )
    if category:
        products = products.filter(category__slug=category)
    if min_price is not None:
        products = products.filter(price__gte=min_price)
    if max_price is not None:
        products = products.filter(price__lte=max_price)
    if in_stock:
        products = products.filter(stock__gt=0)

    # Groupé par catégorie, puis tri demandé
    products = products.order_by("category__name", SORT_MAP.get(sort, "name"))

    paginator = Paginator(products, 24)
    page_obj = paginator.get_page(request.GET.get("page"))

    return JsonResponse({
        "ok": True,
        "products": [product_payload(p) for p in page_obj],
        "page": page_obj.number,
        "pages": paginator.num_pages,
        "count": paginator.count,
        "categories": list(Category.objects.values("name", "slug")),
    })


@require_http_methods(["GET"])
def product_detail(request, slug):
    product = get_object_or_404(
        Product.objects.select_related("category"),
        slug=slug,
        is_available=True
    )
    return JsonResponse({"ok": True, "product": product_payload(product)})
