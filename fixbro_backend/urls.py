# fixbro_backend/urls.py

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

admin.site.site_header = "FixBro"
admin.site.site_title = "FixBro Admin"
admin.site.index_title = "Welcome to the Dashboard"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('auth/', include('django.contrib.auth.urls')),
    path('catalog/', include('catalog.urls', namespace='catalog')),
    path('cart/', include('cart.urls', namespace='cart')),
    path('checkout/schedule/', include('scheduling.urls', namespace='scheduling')),
    path('checkout/promo/', include('promotions.urls', namespace='promotions')),
    path('', include('bookings.urls', namespace='bookings')),
    path('providers/', include('providers.urls', namespace='providers')),
    path('staff/', include('admin_panel.urls', namespace='admin_panel')),
    path('', include('core.urls', namespace='core')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
