from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'groups'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.GroupViewSet, basename='group')

urlpatterns = [
    # Group ViewSet routes
    # GET    /api/groups/                              - List user's groups
    # POST   /api/groups/                              - Create group
    # GET    /api/groups/{id}/                         - Group with members
    # PUT    /api/groups/{id}/                         - Update group (admin)
    # DELETE /api/groups/{id}/                         - Delete group (admin)
    #
    # Custom group actions
    # PUT    /api/groups/{id}/settings/                - Update settings (admin)
    # DELETE /api/groups/{id}/settings/                - Delete group (admin)
    # GET    /api/groups/{id}/members/                 - List members
    # POST   /api/groups/{id}/members/                 - Add member by email (admin)
    # PUT    /api/groups/{id}/members/{user_id}/       - Change role (admin)
    # DELETE /api/groups/{id}/members/{user_id}/       - Remove member
    # DELETE /api/groups/{id}/leave/                   - Leave group
    # GET    /api/groups/{id}/invitations/             - Pending invitations
    # POST   /api/groups/{id}/invitations/             - Invite by email
    # GET    /api/groups/{id}/expenses/                - List expenses
    # POST   /api/groups/{id}/expenses/                - Add expense
    # GET    /api/groups/{id}/expenses/{expense_id}/   - Expense detail
    # PUT    /api/groups/{id}/expenses/{expense_id}/   - Update expense (payer)
    # DELETE /api/groups/{id}/expenses/{expense_id}/   - Delete expense (payer)

    # Invitation redemption
    path('invitation-details/', views.invitation_details, name='invitation-details'),
    path('join/', views.join_group, name='join'),

    # Include router URLs
    path('', include(router.urls)),
]
