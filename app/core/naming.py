"""Naming helpers shared by the normalizer, synthesizer and resource deriver."""
import re


def to_snake_case(name: str) -> str:
    """Convert PascalCase, camelCase or spaced words to snake_case."""
    s1 = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    s2 = re.sub('([a-z0-9])([A-Z])', r'\1_\2', s1)
    return re.sub(r'[\s\-]+', '_', s2).lower()


def to_kebab_case(name: str) -> str:
    """Convert PascalCase or camelCase to kebab-case."""
    return to_snake_case(name).replace('_', '-')


def slugify(value: str) -> str:
    """Lowercase slug made of [a-z0-9_] suitable for entity/view ids."""
    slug = to_snake_case(value.strip())
    slug = re.sub(r'[^a-z0-9_]+', '_', slug)
    return re.sub(r'_+', '_', slug).strip('_')


def humanize(name: str) -> str:
    """Turn an identifier like ``clientId`` or ``due_date`` into ``Client Id`` / ``Due Date``."""
    words = to_snake_case(name).replace('-', '_').split('_')
    return ' '.join(w.capitalize() for w in words if w)


def pluralize(word: str) -> str:
    """Simple English pluralization for labels."""
    if not word:
        return word
    lower = word.lower()
    if lower.endswith(('s', 'x', 'z', 'ch', 'sh')):
        return word + 'es'
    if lower.endswith('y') and len(lower) > 1 and lower[-2] not in 'aeiou':
        return word[:-1] + 'ies'
    return word + 's'


def singularize(word: str) -> str:
    """Best-effort inverse of :func:`pluralize`."""
    lower = word.lower()
    if lower.endswith('ies') and len(word) > 3:
        return word[:-3] + 'y'
    if lower.endswith(('ches', 'shes', 'sses', 'xes', 'zes')):
        return word[:-2]
    if lower.endswith('s') and not lower.endswith('ss') and len(word) > 1:
        return word[:-1]
    return word
