import uuid
from django.db.models import *


class AutoDateTimeAbstract(Model):
    created_at = DateTimeField(auto_now_add=True, verbose_name='Creado el')
    updated_at = DateTimeField(auto_now=True, verbose_name='Actualizado el')

    class Meta:
        abstract = True


class AutoDateTimeIdAbstract(AutoDateTimeAbstract):
    id = UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True
