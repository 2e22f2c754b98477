from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('email', 'name', 'username', 'role', 'is_active', 'is_staff')
    list_filter = ('role', 'is_staff', 'is_superuser', 'is_active')
    search_fields = ('email', 'name', 'username')
    ordering = ('name', 'email')
    fieldsets = UserAdmin.fieldsets + (
        ('Framety', {'fields': ('name', 'role')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Framety', {'fields': ('email', 'name', 'role')}),
    )
