"""
Soft-delete ledger.

Generic operations over any model carrying the deletable capability
(``SoftDeletableModel``). Default reads never see logically deleted rows;
the ``*_including_deleted`` and ``find_deleted`` helpers are the only way
around that filter.
"""
import logging

from django.db import IntegrityError, models, transaction
from django.utils.text import capfirst

from .exceptions import NotFound, ReferentialIntegrity
from .models import SoftDeletableModel

logger = logging.getLogger(__name__)


def entity_name(model) -> str:
    return capfirst(str(model._meta.verbose_name))


def _deletable(model):
    if not issubclass(model, SoftDeletableModel):
        raise TypeError(f"{model.__name__} does not support soft deletion")
    return model


def find_all(model):
    return _deletable(model).objects.all()


def find_deleted(model):
    return _deletable(model).all_objects.deleted()


def find_including_deleted(model, **filters):
    return _deletable(model).all_objects.filter(**filters)


def get_alive(model, pk):
    try:
        return _deletable(model).objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(entity_name(model), pk)


def get_including_deleted(model, pk):
    try:
        return _deletable(model).all_objects.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(entity_name(model), pk)


@transaction.atomic
def soft_delete(model, pk, actor=None):
    """Mark a live row as deleted. A row that is already deleted counts as absent."""
    instance = get_alive(model, pk)
    instance.soft_delete()
    logger.info(f"{entity_name(model)} {pk} soft-deleted by {getattr(actor, 'pk', actor)}")
    return instance


def hard_delete(model, pk, actor=None):
    """Physically remove a row, deleted or not. Irreversible. Also serves plain entities."""
    manager = getattr(model, "all_objects", model._default_manager)
    try:
        instance = manager.get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(entity_name(model), pk)
    try:
        with transaction.atomic():
            models.Model.delete(instance)
    except (models.ProtectedError, models.RestrictedError, IntegrityError) as e:
        logger.warning(f"Refused hard delete of {entity_name(model)} {pk}: {e}")
        raise ReferentialIntegrity(entity_name(model), pk) from e
    logger.info(f"{entity_name(model)} {pk} hard-deleted by {getattr(actor, 'pk', actor)}")


@transaction.atomic
def restore(model, pk, actor=None):
    try:
        instance = _deletable(model).all_objects.deleted().get(pk=pk)
    except model.DoesNotExist:
        raise NotFound(entity_name(model), pk, f"No deleted {model._meta.verbose_name} with id {pk}")
    instance.restore()
    logger.info(f"{entity_name(model)} {pk} restored by {getattr(actor, 'pk', actor)}")
    return instance
