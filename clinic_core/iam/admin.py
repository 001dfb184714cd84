from django.contrib import admin

from clinic_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "specialization", "is_active", "created_at")
    list_filter = ("role", "is_active")
    search_fields = ("user__username", "user__first_name", "user__last_name", "specialization")
    readonly_fields = ("created_at", "updated_at")
