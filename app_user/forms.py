from django.contrib.auth import forms as auth_forms

from .models import CustomUser


class UserCreationForm(auth_forms.UserCreationForm):
    class Meta:
        model = CustomUser
        fields = ("email",)


class UserChangeForm(auth_forms.UserChangeForm):
    class Meta:
        model = CustomUser
        fields = ("email",)
