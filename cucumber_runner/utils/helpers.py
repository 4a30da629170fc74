"""Helper utilities"""
import re
from typing import Dict, Any

ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*[A-Za-z]')
ZERO_WIDTH_RE = re.compile('[\u200B-\u200D\uFEFF]')


def deep_get(dictionary: Dict, keys: str, default: Any = None) -> Any:
    """Get nested dictionary value using dot notation"""
    value = dictionary

    for key in keys.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def strip_terminal_codes(text: str) -> str:
    """Remove colour escape sequences and zero-width characters"""
    return ZERO_WIDTH_RE.sub('', ANSI_ESCAPE_RE.sub('', text))
