from django.urls import path
from . import views

app_name = 'shop_payments'

urlpatterns = [
    path('tokenize/', views.tokenize_card, name='tokenize'),
    path('charge/', views.charge_order, name='charge'),
]
