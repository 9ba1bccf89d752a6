from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    CategoryListView,
    category_suggest,
    AdminCategoryViewSet,
    ServiceListView,
    ServiceDetailView,
    MyProviderServiceViewSet,
    search_view,
    travel_cost_view,
)

router = SimpleRouter()
router.register(r'admin/categories', AdminCategoryViewSet, basename='admin-categories')
router.register(r'services/mine', MyProviderServiceViewSet, basename='my-services')

urlpatterns = [
    path('categories/', CategoryListView.as_view(), name='category-list'),
    path('categories/suggest/', category_suggest, name='category-suggest'),
    path('services/', ServiceListView.as_view(), name='service-list'),
    path('services/search/', search_view, name='service-search'),
    path('services/travel-cost/', travel_cost_view, name='service-travel-cost'),
    path('services/<int:pk>/', ServiceDetailView.as_view(), name='service-detail'),
    path('', include(router.urls)),
]
