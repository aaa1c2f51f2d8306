from django.contrib import admin

from festivals.models import Festival, Performance, UserAccount


class PerformanceInline(admin.TabularInline):
    model = Performance
    extra = 0
    fields = ["name", "genre", "state", "stage_manager"]
    readonly_fields = ["state"]


@admin.register(UserAccount)
class UserAccountAdmin(admin.ModelAdmin):
    list_display = ["username", "full_name", "roles", "created_at"]
    search_fields = ["username", "full_name"]


@admin.register(Festival)
class FestivalAdmin(admin.ModelAdmin):
    list_display = ["name", "venue", "start_date", "state", "created_at"]
    list_filter = ["state"]
    search_fields = ["name", "venue"]
    inlines = [PerformanceInline]


@admin.register(Performance)
class PerformanceAdmin(admin.ModelAdmin):
    list_display = ["name", "festival", "genre", "state", "score"]
    list_filter = ["state", "festival"]
    search_fields = ["name", "genre"]
