from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    path('config/', views.app_config_view, name='app_config'),
    path('notifications/', views.notification_list, name='notifications'),
    path('notifications/<int:pk>/read/', views.mark_notification_read, name='notification_read'),
    path('notifications/read-all/', views.mark_all_notifications_read, name='notifications_read_all'),
]
