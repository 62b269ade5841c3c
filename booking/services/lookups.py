"""
lookups.py
----------
Resolve "instance or primary key" arguments for the scheduling services.
"""

from ..exceptions import NotFound


def get_or_not_found(model, value, label=None):
    """
    Return 'value' if it already is a 'model' instance, otherwise load it by
    primary key. Raises NotFound when no row matches.
    """
    if isinstance(value, model):
        return value
    label = label or model._meta.verbose_name.capitalize()
    try:
        return model.objects.get(pk=value)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFound(f"{label} {value} not found.")
