from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from .models import Category, Service


def serialize_service(service):
    return {
        'id': service.pk,
        'name': service.name,
        'slug': service.slug,
        'description': service.description,
        'image': service.image.url if service.image else None,
        'price': str(service.price),
        'discounted_price': str(service.discounted_price) if service.discounted_price is not None else None,
        'displayed_price': str(service.displayed_price),
        'is_tax_inclusive': service.is_tax_inclusive,
        'tax_name': service.tax_name,
        'tax_percent': str(service.tax_percent),
        'rating': str(service.rating),
        'review_count': service.review_count,
        'task_time': service.task_time,
        'allow_pay_later': service.allow_pay_later,
        'sub_category': service.sub_category.name,
        'category_id': service.category_id,
    }


@require_GET
def category_list(request):
    categories = Category.objects.filter(is_active=True).prefetch_related('subcategories')
    return JsonResponse({
        'categories': [
            {
                'id': category.pk,
                'name': category.name,
                'slug': category.slug,
                'subcategories': [
                    {'id': sub.pk, 'name': sub.name, 'slug': sub.slug}
                    for sub in category.subcategories.all()
                ],
            }
            for category in categories
        ]
    })


@require_GET
def category_services(request, slug):
    category = get_object_or_404(Category, slug=slug, is_active=True)
    services = (Service.objects
                .filter(sub_category__parent_category=category, is_active=True)
                .select_related('sub_category'))
    sub_slug = request.GET.get('sub')
    if sub_slug:
        services = services.filter(sub_category__slug=sub_slug)
    return JsonResponse({
        'category': {'id': category.pk, 'name': category.name, 'slug': category.slug},
        'services': [serialize_service(service) for service in services],
    })


@require_GET
def service_detail(request, slug):
    service = get_object_or_404(Service.objects.select_related('sub_category'), slug=slug, is_active=True)
    return JsonResponse(serialize_service(service))
