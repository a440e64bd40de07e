"""Helpers for entities carrying a unique name column."""
import logging

from django.db import IntegrityError, transaction

from .exceptions import DuplicateName, require_name
from .soft_delete import entity_name

logger = logging.getLogger(__name__)


def _name_taken(model, field, value, exclude_pk=None) -> bool:
    # The unique constraint spans every row, soft-deleted ones included.
    manager = getattr(model, "all_objects", model._default_manager)
    qs = manager.filter(**{field: value})
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def create_named(model, field: str, value: str, **fields):
    """Insert a row whose ``field`` must be non-blank and unique."""
    value = require_name(value, field)
    entity = entity_name(model)
    if _name_taken(model, field, value):
        raise DuplicateName(entity, value)
    try:
        with transaction.atomic():
            instance = model._default_manager.create(**{field: value}, **fields)
    except IntegrityError as e:
        logger.warning(f"{entity} {value!r} rejected by unique constraint: {e}")
        raise DuplicateName(entity, value) from e
    logger.info(f"{entity} {instance.pk} created: {value}")
    return instance


def update_named(instance, field: str, value=None, **fields):
    """Rename and/or update other fields; the new name is checked against every other row."""
    model = type(instance)
    entity = entity_name(model)
    changed = []
    if value is not None:
        value = require_name(value, field)
        if _name_taken(model, field, value, exclude_pk=instance.pk):
            raise DuplicateName(entity, value)
        setattr(instance, field, value)
        changed.append(field)
    for name, field_value in fields.items():
        if field_value is not None:
            setattr(instance, name, field_value)
            changed.append(name)
    if not changed:
        return instance
    try:
        with transaction.atomic():
            instance.save(update_fields=[*changed, "updated_at"])
    except IntegrityError as e:
        raise DuplicateName(entity, value) from e
    logger.info(f"{entity} {instance.pk} updated: {', '.join(changed)}")
    return instance
