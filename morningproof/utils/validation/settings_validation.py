from pydantic import ValidationError


def invalid_fields(error: ValidationError) -> str:
    """Comma-separated names of the fields a ValidationError rejected"""
    names = []
    for item in error.errors():
        name = ".".join(str(part) for part in item.get("loc", ())) or "value"
        if name not in names:
            names.append(name)
    return ", ".join(names)
