from django.urls import path
from . import views

app_name = 'scheduling'

urlpatterns = [
    path('slots/', views.schedule_slots, name='slots'),
    path('', views.select_schedule, name='select'),
]
