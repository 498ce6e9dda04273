from django.contrib import admin
from django.urls import path

admin.site.site_header = "Cinema back office"
admin.site.site_title = "Cinema back office"

urlpatterns = [
    path('admin/', admin.site.urls),
]
