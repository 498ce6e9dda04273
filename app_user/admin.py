# admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from import_export.admin import ImportExportModelAdmin
from .models import CustomUser, Profile
from .forms import UserCreationForm, UserChangeForm


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ("first_name", "last_name", "role")


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    # Formularios que usará el admin
    add_form = UserCreationForm     # formulario al crear
    form = UserChangeForm           # formulario al editar
    model = CustomUser
    inlines = [ProfileInline]

    # Columnas que se ven en el listado
    list_display = ('id', 'email', 'role', 'is_staff', 'is_active')
    ordering = ('email',)

    # Búsqueda
    search_fields = ('email', 'profile__first_name', 'profile__last_name')

    # Campos que aparecen cuando EDITAS un usuario
    fieldsets = (
        (None, {"fields": ('email', 'password')}),
        (_("Permissions"), {
            "fields": (
                "is_active",
                "is_staff",
                "is_superuser",
                "groups",
                "user_permissions",
            ),
        }),
        (_("Important dates"), {"fields": ("last_login",)}),
    )

    # Campos que aparecen cuando CREAS un usuario
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "password1", "password2"),
        }),
    )

    @admin.display(description="Rol", ordering="profile__role")
    def role(self, obj):
        profile = getattr(obj, "profile", None)
        return profile.role if profile else "-"

    def get_inline_instances(self, request, obj=None):
        # El perfil lo crea la señal post_save; en el alta no se muestra
        if obj is None:
            return []
        return super().get_inline_instances(request, obj)


@admin.register(Profile)
class ProfileAdmin(ImportExportModelAdmin):
    list_display = ("user", "first_name", "last_name", "role", "created_at")
    list_filter = ("role",)
    search_fields = ("user__email", "first_name", "last_name")
    raw_id_fields = ("user",)
