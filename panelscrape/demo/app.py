"""Demo icon catalog website.

A FastAPI application serving a small icon catalog whose details panel is
filled in by JavaScript after each click, plus a JSON API listing the same
icons so extraction output can be checked against the source data.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse

from panelscrape.demo.data import ICONS, ICONS_BY_NAME, catalog_page_html

app = FastAPI(title="Demo Icon Catalog", version="1.0.0")


@app.get("/", response_class=HTMLResponse)
async def catalog_page(delay: int = Query(150, ge=0, le=10000)):
    return HTMLResponse(content=catalog_page_html(delay_ms=delay))


@app.get("/api/icons")
async def api_icons():
    return JSONResponse([asdict(icon) for icon in ICONS])


@app.get("/api/icons/{name}")
async def api_icon_detail(name: str):
    icon = ICONS_BY_NAME.get(name)
    if icon is None:
        raise HTTPException(status_code=404, detail=f"No icon named {name}")
    return JSONResponse(asdict(icon))
