"""
Association registry for composite-key join entities.

An association model binds two endpoints ``a`` and ``b`` through a
``CompositePrimaryKey`` made of the two foreign keys, optionally carrying a
payload (a role, a workflow, a position...). The model exposes an immutable
``Key`` tuple, which is what every keyed lookup here goes through: existence
of an association is a primary key lookup, never a scan.
"""
import logging

from django.db import IntegrityError, transaction

from .exceptions import DuplicateAssociation, NotFound
from .soft_delete import entity_name

logger = logging.getLogger(__name__)


class AssociationRegistry:
    def __init__(self, model, a: str, b: str):
        self.model = model
        self.a = a
        self.b = b
        self.a_model = model._meta.get_field(a).related_model
        self.b_model = model._meta.get_field(b).related_model

    @property
    def entity(self) -> str:
        return entity_name(self.model)

    def key(self, id_a, id_b):
        return self.model.Key(id_a, id_b)

    def queryset(self):
        return self.model.objects.select_related(self.a, self.b)

    def duplicate_error(self, key, payload):
        return DuplicateAssociation(self.entity, key)

    def _resolve(self, related_model, pk):
        try:
            return related_model._default_manager.get(pk=pk)
        except related_model.DoesNotExist:
            raise NotFound(entity_name(related_model), pk)

    # Lookups

    def exists(self, id_a, id_b) -> bool:
        return self.model.objects.filter(pk=self.key(id_a, id_b)).exists()

    def find_exact(self, id_a, id_b):
        try:
            return self.queryset().get(pk=self.key(id_a, id_b))
        except self.model.DoesNotExist:
            return None

    def get(self, id_a, id_b):
        obj = self.find_exact(id_a, id_b)
        if obj is None:
            raise NotFound(self.entity, self.key(id_a, id_b))
        return obj

    def find_by_a(self, id_a):
        return self.queryset().filter(**{f"{self.a}_id": id_a})

    def find_by_b(self, id_b):
        return self.queryset().filter(**{f"{self.b}_id": id_b})

    def count_by_a(self, id_a) -> int:
        return self.model.objects.filter(**{f"{self.a}_id": id_a}).count()

    def count_by_b(self, id_b) -> int:
        return self.model.objects.filter(**{f"{self.b}_id": id_b}).count()

    # Derived projections: computed from the current rows, never stored.

    def b_for_a(self, id_a):
        ids = self.model.objects.filter(**{f"{self.a}_id": id_a}).values(f"{self.b}_id")
        return self.b_model._default_manager.filter(pk__in=ids)

    def a_for_b(self, id_b):
        ids = self.model.objects.filter(**{f"{self.b}_id": id_b}).values(f"{self.a}_id")
        return self.a_model._default_manager.filter(pk__in=ids)

    # Mutations

    def create(self, id_a, id_b, **payload):
        key = self.key(id_a, id_b)
        with transaction.atomic():
            a_obj = self._resolve(self.a_model, id_a)
            b_obj = self._resolve(self.b_model, id_b)
            if self.exists(id_a, id_b):
                raise self.duplicate_error(key, payload)
            self.validate_new(key, payload)
            try:
                with transaction.atomic():
                    obj = self.model.objects.create(**{self.a: a_obj, self.b: b_obj}, **payload)
            except IntegrityError as e:
                # Lost a race against a concurrent creator; the storage key decided.
                logger.warning(f"{self.entity} {key} rejected by storage constraint: {e}")
                raise self.translate_integrity_error(key, payload, e) from e
        logger.info(f"{self.entity} {key} created")
        return obj

    def validate_new(self, key, payload):
        """Extra checks run inside the creating transaction, after the key check."""

    def translate_integrity_error(self, key, payload, error):
        if self.exists(*key):
            return self.duplicate_error(key, payload)
        return error

    def update(self, id_a, id_b, **payload):
        obj = self.get(id_a, id_b)
        for field, value in payload.items():
            setattr(obj, field, value)
        obj.save(update_fields=[*payload.keys(), "updated_at"])
        return obj

    def delete(self, id_a, id_b):
        deleted, _ = self.model.objects.filter(pk=self.key(id_a, id_b)).delete()
        if not deleted:
            raise NotFound(self.entity, self.key(id_a, id_b))
        logger.info(f"{self.entity} {self.key(id_a, id_b)} deleted")

    def delete_by_a(self, id_a) -> int:
        deleted, _ = self.model.objects.filter(**{f"{self.a}_id": id_a}).delete()
        logger.info(f"Removed {deleted} {self.model._meta.verbose_name_plural} for {self.a} {id_a}")
        return deleted

    def delete_by_b(self, id_b) -> int:
        deleted, _ = self.model.objects.filter(**{f"{self.b}_id": id_b}).delete()
        logger.info(f"Removed {deleted} {self.model._meta.verbose_name_plural} for {self.b} {id_b}")
        return deleted
