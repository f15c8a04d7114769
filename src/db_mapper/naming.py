"""Column name conversion.

Derives the external key (``user_id`` -> ``userID``) and the display title
(``user_id`` -> ``User ID``) for a physical column name.  Behaviour is
driven by an explicit ``NamingConfig`` handed to ``Naming`` at construction,
so two tables can use different conventions side by side.

Usage:
    from db_mapper.naming import Naming
    from db_mapper.config.models import NamingConfig

    naming = Naming(NamingConfig(uppercase_words=frozenset({"ID", "URL"})))
    naming.key("home_url")    # 'homeURL'
    naming.title("home_url")  # 'Home URL'
"""

import re

from db_mapper.config.models import NamingConfig

# Splits snake_case, kebab-case, spaces and camelCase boundaries.
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


class Naming:
    """Pure, deterministic name -> key and name -> title conversion.

    Args:
        config: Naming options.  Defaults to ``NamingConfig()`` (enabled,
            ``ID`` always uppercase).

    Example:
        >>> naming = Naming()
        >>> naming.key("parent_id")
        'parentID'
        >>> naming.title("parent_id")
        'Parent ID'
        >>> naming.key("id")
        'id'
    """

    def __init__(self, config: NamingConfig | None = None) -> None:
        self.config = config or NamingConfig()
        self._upper = frozenset(w.upper() for w in self.config.uppercase_words)

    def words(self, name: str) -> list[str]:
        """Split a column name into words."""
        return _WORD_PATTERN.findall(name)

    def _word(self, word: str) -> str:
        if word.upper() in self._upper:
            return word.upper()
        return word[:1].upper() + word[1:].lower()

    def key(self, name: str) -> str:
        """Convert a column name to its external key (lower camel case)."""
        if not self.config.enabled:
            return name
        words = self.words(name)
        if not words:
            return name
        return words[0].lower() + "".join(self._word(w) for w in words[1:])

    def title(self, name: str) -> str:
        """Convert a column name to a human-readable title."""
        if not self.config.enabled:
            return name
        words = self.words(name)
        if not words:
            return name
        return " ".join(self._word(w) for w in words)


DEFAULT_NAMING = Naming()
