"""Main API URL router for /api/v1/."""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from notifications import notification_views
from subscriptions import subscription_views
from targets import target_views

router = DefaultRouter()
router.register(r'plans', target_views.PlanViewSet, basename='plan')
router.register(r'target-templates', target_views.TargetTemplateViewSet, basename='target-template')
router.register(r'target-assignments', target_views.TargetAssignmentViewSet, basename='target-assignment')
router.register(r'subscriptions', subscription_views.SubscriptionViewSet, basename='subscription')
router.register(r'subscription-submissions', subscription_views.SubscriptionSubmissionViewSet, basename='subscription-submission')
router.register(r'notifications', notification_views.NotificationViewSet, basename='notification')


app_name = 'api'
urlpatterns = [
    path('', include(router.urls)),

    # Auth endpoints
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
]
