"""
Escapes do formato GIFT.
"""

import re

_SPECIAL_CHARS = "~=#{}"
_ESCAPED_RE = re.compile(r'\\([\\~=#{}:])')


def escape_gift(text: str) -> str:
    """Escapa texto livre para ser inserido em markup GIFT novo.

    Não aplicar a conteúdo que já veio de um ficheiro GIFT válido.
    """
    text = text.replace('\\', '\\\\')
    for char in _SPECIAL_CHARS:
        text = text.replace(char, '\\' + char)
    return text


def unescape_gift(text: str) -> str:
    """Remove escapes do formato GIFT."""
    return _ESCAPED_RE.sub(r'\1', text)
