from django.urls import path
from .views import (
    TaskListCreateView, TaskDetailView, TaskStageView, TaskStageListView,
    StageContentSaveView, StageContentDetailView, TaskStatusHistoryView,
)

urlpatterns = [
    path('', TaskListCreateView.as_view(), name='task-list-create'),
    path('status-history/', TaskStatusHistoryView.as_view(), name='task-status-history'),
    path('stage-content/', StageContentSaveView.as_view(), name='stage-content-save'),
    path('<int:pk>/', TaskDetailView.as_view(), name='task-detail'),

    # stage tracker
    path('<int:task_id>/stage/', TaskStageView.as_view(), name='task-stage'),
    path('<int:task_id>/stages/', TaskStageListView.as_view(), name='task-stages'),
    path('<int:task_id>/stage-content/<str:stage_name>/', StageContentDetailView.as_view(), name='stage-content-detail'),
]
