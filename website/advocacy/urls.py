from django.urls import path
from . import views

app_name = 'advocacy'

urlpatterns = [
    # Jurisdiction lookup
    path('api/lookup/<str:country>/', views.lookup_postal_code, name='lookup_postal_code'),

    # Campaign targets
    path('api/targets/template.csv', views.target_template_csv, name='target_template_csv'),
    path('api/targets/google-sheet/', views.google_sheet_csv, name='google_sheet_csv'),
    path('campaigns/<slug:slug>/targets/preview/', views.campaign_targets_preview, name='campaign_targets_preview'),
    path('campaigns/<slug:slug>/targets/save/', views.campaign_targets_save, name='campaign_targets_save'),

    # Letter cache
    path('api/letter-cache/', views.letter_cache, name='letter_cache'),
    path('api/letter-cache/emailed/', views.letter_cache_emailed, name='letter_cache_emailed'),
    path(
        'api/letter-cache/remaining/<str:country>/<str:district_id>/',
        views.letter_cache_remaining,
        name='letter_cache_remaining',
    ),
]
