"""Template cache: compiled pages by name, built once at startup."""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from pagerender.exceptions import TemplateError
from pagerender.templates.store import CompiledTemplate, TemplateStore
from pagerender.utils.logging import get_logger

logger = get_logger(__name__)

_EMPTY: Mapping[str, CompiledTemplate] = MappingProxyType({})


class TemplateCache:
    """Read-only mapping from template name to compiled template.

    The mapping is replaced wholesale by ``initialize`` and never modified in
    place, so readers on other threads always see a complete snapshot. Pages
    compiled on a cache miss are not added.
    """

    def __init__(self, store: TemplateStore) -> None:
        self.store = store
        self._templates: Mapping[str, CompiledTemplate] = _EMPTY

    def initialize(self, use_cache: bool) -> bool:
        """Build the cache when ``use_cache`` is set, otherwise empty it.

        A failed build is logged and leaves the cache empty; every render then
        compiles its page on demand.

        Returns:
            True if the cache was built
        """
        if not use_cache:
            self._templates = _EMPTY
            return False

        try:
            templates = self.store.build_all()
        except TemplateError as e:
            logger.error("Cannot create templates cache: %s", e)
            self._templates = _EMPTY
            return False

        self._templates = MappingProxyType(templates)
        logger.info("Cached %d template(s) from %s", len(templates), self.store.directory)
        return True

    def lookup(self, name: str) -> CompiledTemplate | None:
        """Return the cached template for ``name``, if any."""
        return self._templates.get(name)

    def names(self) -> list[str]:
        """Sorted names of cached templates."""
        return sorted(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)
