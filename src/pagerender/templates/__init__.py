"""Template compilation, caching and rendering.

- TemplateStore: compiles page fragments together with shared layouts
- TemplateCache: compiled pages by name, built once at startup
- PageRenderer: resolves a page and writes it to an output sink
"""

from pagerender.templates.cache import TemplateCache
from pagerender.templates.renderer import PageRenderer
from pagerender.templates.store import CompiledTemplate, TemplateStore

__all__ = ["CompiledTemplate", "PageRenderer", "TemplateCache", "TemplateStore"]
