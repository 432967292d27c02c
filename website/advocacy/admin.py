from django.contrib import admin

from .models import Campaign, CampaignTarget


class CampaignTargetInline(admin.TabularInline):
    model = CampaignTarget
    fields = ['name', 'email', 'postal_code', 'city', 'category']
    extra = 0
    show_change_link = True


@admin.register(Campaign)
class CampaignAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'country', 'uses_custom_targets', 'target_count', 'created_at']
    list_filter = ['country', 'uses_custom_targets']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']
    inlines = [CampaignTargetInline]

    def target_count(self, obj):
        return obj.targets.count()
    target_count.short_description = 'Targets'


@admin.register(CampaignTarget)
class CampaignTargetAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'postal_code', 'city', 'country_code', 'category', 'campaign']
    list_filter = ['campaign', 'country_code', 'category']
    search_fields = ['name', 'email', 'postal_code', 'city']
    raw_id_fields = ['campaign']
    readonly_fields = ['created_at']
