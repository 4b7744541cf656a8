"""Demo icon catalog for panelscrape.

This package provides a small website whose icon buttons open a details
panel, and a catalog declaration that extracts every icon's name and code
point from it.

Requires the ``demo`` extra::

    pip install panelscrape[demo]
"""

try:
    import fastapi  # noqa: F401
    import uvicorn  # noqa: F401
except ImportError as e:
    raise ImportError(
        "Demo features require the 'demo' extra. "
        "Install with: pip install panelscrape[demo]"
    ) from e
