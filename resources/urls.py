from django.urls import path
from .views import ResourceListCreateView, ResourceDetailView, ResourceLikeView, ResourceViewCountView

urlpatterns = [
    path('', ResourceListCreateView.as_view(), name='resource-list-create'),
    path('<int:pk>/', ResourceDetailView.as_view(), name='resource-detail'),
    path('<int:pk>/like/', ResourceLikeView.as_view(), name='resource-like'),
    path('<int:pk>/view/', ResourceViewCountView.as_view(), name='resource-view'),
]
