from django.contrib import admin
from django.urls import path
from clinic import views, views_auth, views_metrics

# All JSON endpoints consumed by the dashboard pages
urlpatterns = [
    path('admin/', admin.site.urls),
    path('metrics', views_metrics.metrics, name='metrics'),
    path('api/health/', views.health, name='health'),

    path('api/auth/signup/', views_auth.signup, name='signup'),
    path('api/auth/login/', views_auth.login_view, name='login'),
    path('api/auth/logout/', views_auth.logout_view, name='logout'),
    path('api/auth/password-reset/', views_auth.password_reset, name='password_reset'),
    path('api/auth/password-reset/confirm/', views_auth.password_reset_confirm, name='password_reset_confirm'),
    path('api/auth/session/', views_auth.session_view, name='session'),

    path('api/questionnaires/', views.questionnaires, name='questionnaires'),
    path('api/questionnaires/<int:questionnaire_id>/', views.questionnaire_detail, name='questionnaire_detail'),
    path('api/intake/<str:source>/', views.intake, name='intake'),
    path('api/patients/<str:resident_id>/', views.patient_detail, name='patient_detail'),

    path('api/consultations/', views.consultations, name='consultations'),
    path('api/consultations/recent/', views.recent_consultations, name='recent_consultations'),
    path('api/consultations/<int:consultation_id>/', views.consultation_detail, name='consultation_detail'),

    path('api/dashboard/', views.dashboard, name='dashboard'),
    path('api/stats/sales/', views.sales_stats, name='sales_stats'),

    path('api/messages/', views.messages, name='messages'),
    path('api/messages/status/', views.message_status, name='message_status'),
]
