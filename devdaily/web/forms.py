"""Form decoding for HTML and HTMX handlers."""

from typing import Any

from fastapi import Request
from starlette.datastructures import UploadFile

# Fields that may legitimately repeat in a form submission
LIST_FIELDS = ("product_ids", "badge_ids", "category_ids", "permissions")


async def read_form(request: Request) -> dict[str, Any]:
    """Flatten a submitted form into a plain dict.

    Repeated list fields (``product_ids`` or ``product_ids[]``) become
    lists. Uploaded files are left out; read them from the raw form.
    """
    form = await request.form()
    data: dict[str, Any] = {}
    for key in form.keys():
        name = key[:-2] if key.endswith("[]") else key
        values = [value for value in form.getlist(key) if not isinstance(value, UploadFile)]
        if not values:
            continue
        if name in LIST_FIELDS or key.endswith("[]"):
            data.setdefault(name, []).extend(values)
        else:
            data[name] = values[-1]
    return data
