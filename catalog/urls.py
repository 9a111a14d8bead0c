from django.urls import path
from . import views

app_name = 'catalog'

urlpatterns = [
    path('categories/', views.category_list, name='category_list'),
    path('categories/<slug:slug>/', views.category_services, name='category_services'),
    path('services/<slug:slug>/', views.service_detail, name='service_detail'),
]
