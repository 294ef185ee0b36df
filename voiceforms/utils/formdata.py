"""Feed JSON bodies to WTForms.

WTForms reads nested data from flat keys: ``settings-collect_email`` for a
``FormField`` and ``answers-0-question_id`` for a ``FieldList`` of them. JSON
bodies are flattened into that shape before being handed to a form.
"""
from werkzeug.datastructures import MultiDict


def _scalar(value):
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def flatten(payload, prefix=""):
    items = []
    if isinstance(payload, dict):
        for key, value in payload.items():
            items.extend(flatten(value, f"{prefix}-{key}" if prefix else str(key)))
    elif isinstance(payload, (list, tuple)):
        for idx, value in enumerate(payload):
            items.extend(flatten(value, f"{prefix}-{idx}"))
    elif payload is not None:
        items.append((prefix, _scalar(payload)))
    return items


def json_formdata(payload, exclude=()):
    if not isinstance(payload, dict):
        return MultiDict()
    return MultiDict(flatten({k: v for k, v in payload.items() if k not in exclude}))


def clean(value):
    """Blank strings from optional fields become None."""
    if isinstance(value, str) and value == "":
        return None
    return value
