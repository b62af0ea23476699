"""
URL configuration for backend project.
"""
from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from cardstore.urls import admin_urlpatterns, store_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),

    # Card store API
    path('api/admin/', include(admin_urlpatterns)),
    path('api/store/', include(store_urlpatterns)),

    # JWT auth endpoints (access + refresh in JSON)
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
]
