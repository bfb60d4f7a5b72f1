from django.urls import path
from .views import IdeaListCreateView, IdeaDetailView, IdeaVoteView, IdeaCommentView

urlpatterns = [
    path('', IdeaListCreateView.as_view(), name='idea-list-create'),
    path('<int:pk>/', IdeaDetailView.as_view(), name='idea-detail'),
    path('<int:pk>/vote/', IdeaVoteView.as_view(), name='idea-vote'),
    path('<int:pk>/comment/', IdeaCommentView.as_view(), name='idea-comment'),
]
