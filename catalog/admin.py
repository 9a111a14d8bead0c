from django.contrib import admin
from import_export.admin import ImportExportModelAdmin

from .models import Category, Service, SubCategory, Tax


class SubCategoryInline(admin.TabularInline):
    model = SubCategory
    extra = 1
    prepopulated_fields = {'slug': ('name',)}


class ServiceInline(admin.TabularInline):
    model = Service
    extra = 1
    fields = ('name', 'slug', 'price', 'discounted_price', 'tax', 'is_active')
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Category)
class CategoryAdmin(ImportExportModelAdmin):
    list_display = ('name', 'order', 'is_active')
    ordering = ('order',)
    inlines = [SubCategoryInline]
    prepopulated_fields = {'slug': ('name',)}


@admin.register(SubCategory)
class SubCategoryAdmin(ImportExportModelAdmin):
    list_display = ('name', 'parent_category', 'order')
    list_filter = ('parent_category',)
    inlines = [ServiceInline]
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Tax)
class TaxAdmin(ImportExportModelAdmin):
    list_display = ('tax_name', 'tax_percent', 'is_active')
    list_filter = ('is_active',)


@admin.register(Service)
class ServiceAdmin(ImportExportModelAdmin):
    list_display = ('name', 'sub_category', 'price', 'discounted_price', 'tax_percent', 'allow_pay_later', 'is_active')
    list_filter = ('sub_category__parent_category', 'is_active', 'allow_pay_later')
    search_fields = ('name', 'description')
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ('tax_name', 'tax_percent', 'created_at', 'updated_at')
    fieldsets = (
        (None, {
            'fields': (
                'name', 'slug', 'sub_category', 'description', 'image',
                'task_time_value', 'task_time_unit', 'is_active', 'allow_pay_later',
            )
        }),
        ('Pricing', {
            'fields': ('price', 'discounted_price', 'is_tax_inclusive', 'tax', 'tax_name', 'tax_percent')
        }),
        ('Reviews', {
            'fields': ('rating', 'review_count')
        }),
    )
