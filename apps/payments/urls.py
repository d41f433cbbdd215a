from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    path('requests/', views.payment_requests, name='request-list'),
    path('<uuid:pk>/', views.payment_request_detail, name='request-detail'),

    # Payer actions
    path('<uuid:pk>/accept/', views.accept_request, name='request-accept'),
    path('<uuid:pk>/reject/', views.reject_request, name='request-reject'),
    path('<uuid:pk>/mark_paid/', views.mark_paid, name='request-mark-paid'),

    # Payee actions
    path('<uuid:pk>/confirm/', views.confirm_payment, name='request-confirm'),
    path('<uuid:pk>/dispute/', views.dispute_payment, name='request-dispute'),
    path('<uuid:pk>/remind/', views.send_reminder, name='request-remind'),
]
