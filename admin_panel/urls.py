from django.urls import path
from . import views

app_name = 'admin_panel'

urlpatterns = [
    path('dashboard/', views.dashboard_stats, name='dashboard'),
    path('dashboard/chart/', views.booking_chart, name='booking_chart'),
    path('dashboard/activity/', views.activity_feed, name='activity_feed'),
]
