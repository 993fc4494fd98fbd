from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    path('me/', views.get_current_user, name='current-user'),
]
