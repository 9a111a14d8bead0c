from django.urls import path
from . import views

app_name = 'bookings'

urlpatterns = [
    path('checkout/summary/', views.checkout_summary, name='checkout_summary'),
    path('checkout/address/', views.checkout_address, name='checkout_address'),
    path('checkout/place/', views.place_booking, name='place_booking'),

    path('bookings/', views.booking_list, name='list'),
    path('bookings/<str:booking_id>/', views.booking_detail, name='detail'),
    path('bookings/<str:booking_id>/cancellation/', views.booking_cancellation_quote, name='cancellation_quote'),
    path('bookings/<str:booking_id>/cancel/', views.booking_cancel, name='cancel'),
    path('bookings/<str:booking_id>/invoice/', views.booking_invoice, name='invoice'),
]
