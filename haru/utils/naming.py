import keyword
import re
import unicodedata
from urllib.parse import urlparse

__all__ = (
    'capitalize',
    'is_url',
    'sanitize_identifier',
    'sanitize_module_name',
    'sanitize_parameter_name',
)


def capitalize(input_string: str) -> str:
    if not input_string:
        return ''
    return input_string[0].upper() + input_string[1:]


def is_url(text: str) -> bool:
    try:
        result = urlparse(text)
        return result.scheme in ('http', 'https') and bool(result.netloc)
    except ValueError:
        return False


def remove_accents(input_str: str) -> str:
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def sanitize_parameter_name(name: str) -> str:
    """Sanitize a parameter, field or function name into a Python identifier.

    Valid identifiers come back unchanged, keywords get a trailing underscore,
    hyphens and spaces become underscores and other characters are dropped.
    """
    if not name:
        raise ValueError('Name cannot be empty')

    if name.isidentifier() and not keyword.iskeyword(name):
        return name

    sanitized = re.sub(r'[-\s.]+', '_', remove_accents(name))
    sanitized = re.sub(r'[^A-Za-z0-9_]', '', sanitized)

    if not sanitized:
        return '_'
    if sanitized[0].isdigit():
        sanitized = '_' + sanitized
    if keyword.iskeyword(sanitized):
        sanitized = f'{sanitized}_'
    return sanitized


def sanitize_identifier(name: str) -> str:
    """Convert a string into a PascalCase class name.

    - Replace spaces and hyphens with underscores
    - Remove other invalid characters
    - Ensure it doesn't start with a digit
    """
    if not name:
        return 'UnnamedType'

    parts = re.sub(r'[^A-Za-z0-9]+', '_', remove_accents(name)).split('_')

    if len(parts) == 1:
        sanitized = parts[0]
    else:
        sanitized = ''.join(capitalize(part) for part in parts if part)

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized
    if keyword.iskeyword(sanitized):
        sanitized = f'{sanitized}_'

    return sanitized or 'UnnamedType'


def sanitize_module_name(name: str) -> str:
    """Turn a tag into a module file name, keeping its case."""
    return sanitize_parameter_name(name.strip()) if name.strip() else 'Default'
