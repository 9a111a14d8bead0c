from django.urls import path
from . import views

app_name = 'providers'

urlpatterns = [
    path('application/', views.application_detail, name='application'),
    path('application/step/<int:step>/', views.application_step, name='application_step'),
    path('jobs/', views.job_list, name='jobs'),
    path('jobs/<str:booking_id>/<str:action>/', views.job_action, name='job_action'),
    path('earnings/', views.earnings, name='earnings'),
    path('availability/', views.toggle_availability, name='availability'),
]
