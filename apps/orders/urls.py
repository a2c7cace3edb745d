from django.urls import path
from . import views

urlpatterns = [
    path('', views.CreateOrderView.as_view(), name='create-order'),
    path('<uuid:order_id>/', views.OrderDetailView.as_view(), name='order-detail'),
]
