"""pagerender - page rendering for small web servers.

Given a template name and a data payload, pagerender renders an HTML page
from a directory of Jinja2 page fragments and shared layout fragments and
writes it to an output stream.

- Pages are compiled once at startup and cached, or compiled on every
  request when caching is disabled.
- A page missing from the cache is compiled on demand and never cached.
- A failed render is logged and writes nothing; it never stops the server.
"""

__version__ = "0.1.0"
__author__ = "pagerender Contributors"
