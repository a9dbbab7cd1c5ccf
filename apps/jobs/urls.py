from django.urls import path
from . import views

job_post_urlpatterns = [
    path('', views.JobPostListCreateView.as_view(), name='job-post-list'),
    path('<int:id>/', views.JobPostDetailView.as_view(), name='job-post-detail'),
    path('<int:id>/apply/', views.JobPostApplyView.as_view(), name='job-post-apply'),
    path('<int:id>/complete/', views.JobPostCompleteView.as_view(), name='job-post-complete'),
    path(
        '<int:id>/applications/<int:application_id>/approve/',
        views.JobApplicationResponseView.as_view(decision='approved'),
        name='job-application-approve'
    ),
    path(
        '<int:id>/applications/<int:application_id>/reject/',
        views.JobApplicationResponseView.as_view(decision='rejected'),
        name='job-application-reject'
    ),
]

work_post_urlpatterns = [
    path('', views.WorkPostListCreateView.as_view(), name='work-post-list'),
    path('provider/<int:provider_id>/', views.WorkPostsByProviderView.as_view(), name='work-posts-by-provider'),
    path('job/<int:job_post_id>/', views.WorkPostsByJobPostView.as_view(), name='work-posts-by-job-post'),
    path('<int:id>/', views.WorkPostDetailView.as_view(), name='work-post-detail'),
]
