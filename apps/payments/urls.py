from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    path('callback/', views.payment_callback, name='callback'),
    path('callback/<str:provider>/', views.payment_callback, name='provider_callback'),
]
