from django.conf import settings
from django.contrib import admin
from django.utils.html import mark_safe
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'count_products')
    prepopulated_fields = {'slug': ('name',)}
    search_fields = ('name',)

    def count_products(self, obj):
        count = obj.products.count()
        return f"{count} produits"
    count_products.short_description = "Nb. produits"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('preview', 'name', 'category', 'price', 'unit', 'stock', 'stock_level', 'weight_grams', 'is_available')
    list_display_links = ('preview', 'name')
    list_editable = ['price', 'stock', 'is_available']
    list_filter = ('category', 'is_available', 'unit')
    search_fields = ('name', 'description')
    prepopulated_fields = {'slug': ('name',)}
    list_per_page = 20

    def preview(self, obj):
        if obj.image_url:
            return mark_safe(f'<img src="{obj.image_url}" style="width: 50px; height: 50px; object-fit: cover; border-radius: 4px; border: 1px solid #ddd;">')
        return "Sans image"
    preview.short_description = "Image"

    def stock_level(self, obj):
        threshold = getattr(settings, "LOW_STOCK_THRESHOLD", 5)
        if obj.stock == 0:
            return mark_safe('<span style="color: red; font-weight: bold;">🔴</span>')
        elif obj.stock < threshold:
            return mark_safe('<span style="color: orange; font-weight: bold;">🟠</span>')
        else:
            return mark_safe('<span style="color: green; font-weight: bold;">🟢</span>')
    stock_level.short_description = "Niveau"
