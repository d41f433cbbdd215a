from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'bills'

router = DefaultRouter()
router.register(r'', views.BillViewSet, basename='bill')

urlpatterns = [
    # GET  /api/bills/                     - Bills I created or take part in
    # GET  /api/bills/{id}/                - Bill with items, splits, participants
    # POST /api/bills/save-and-request/    - Save bill + raise payment requests
    path('', include(router.urls)),
]
