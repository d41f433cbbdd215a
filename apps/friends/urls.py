from django.urls import path
from . import views

app_name = 'friends'

urlpatterns = [
    # GET  /api/friends/                - Accepted friends
    # POST /api/friends/add/            - Send friend request
    # GET  /api/friends/requests/       - Pending requests for me
    # PUT  /api/friends/requests/       - Accept / reject a request
    # GET  /api/friends/search/?q=      - Find users to befriend
    # GET  /api/friends/{username}/     - Balance and history with a friend
    path('', views.friend_list, name='friend-list'),
    path('add/', views.add_friend, name='friend-add'),
    path('requests/', views.friend_requests, name='friend-requests'),
    path('search/', views.search, name='friend-search'),
    path('<str:username>/', views.friend_detail, name='friend-detail'),
]
