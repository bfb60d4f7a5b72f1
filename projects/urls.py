from django.urls import path
from .views import ProjectListCreateView, ProjectDetailView, TimelineEntryCreateView, TimelineEntryDetailView

urlpatterns = [
    path('', ProjectListCreateView.as_view(), name='project-list-create'),
    path('<int:pk>/', ProjectDetailView.as_view(), name='project-detail'),
    path('<int:pk>/timeline/', TimelineEntryCreateView.as_view(), name='timeline-entry-create'),
    path('<int:project_id>/timeline/<int:entry_id>/', TimelineEntryDetailView.as_view(), name='timeline-entry-detail'),
]
