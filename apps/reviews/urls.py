from django.urls import path

from . import views

app_name = 'reviews'

urlpatterns = [
    path('drop-recommendations', views.drop_recommendation_list_view, name='drop_recommendation_list'),
    path('drop-recommendations/<uuid:recommendation_id>', views.drop_recommendation_review_view,
         name='drop_recommendation_review'),
    path('appeals', views.appeal_list_view, name='appeal_list'),
    path('appeals/<uuid:appeal_id>', views.appeal_review_view, name='appeal_review'),
    path('grace-periods', views.grace_period_create_view, name='grace_period_create'),
    path('instructors/notes', views.note_create_view, name='note_create'),
]
