"""Icon data and page markup for the demo icon catalog.

The catalog page lists icon buttons inside a labelled listbox. Clicking an
icon fills a side panel after a short render delay, the way real catalog
sites load details asynchronously. Two kinds of noise are included on
purpose: a button in the grid that does not open the panel (it fails the
attribute predicates) and an icon whose details never render sections.
"""

from __future__ import annotations

import html
import json
from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class DemoIcon:
    """One icon of the demo catalog."""

    name: str
    code_point: str
    category: str
    broken: bool = False


ICONS: list[DemoIcon] = [
    DemoIcon("home", "e88a", "Actions"),
    DemoIcon("search", "e8b6", "Actions"),
    DemoIcon("settings", "e8b8", "Actions"),
    DemoIcon("favorite", "e87d", "Social"),
    DemoIcon("bug_report", "e868", "Developer", broken=True),
    DemoIcon("delete", "e872", "Actions"),
    DemoIcon("menu", "e5d2", "Navigation"),
    DemoIcon("close", "e5cd", "Navigation"),
]

ICONS_BY_NAME = {icon.name: icon for icon in ICONS}

_CSS = """\
body { font-family: sans-serif; display: flex; gap: 2em; margin: 2em; }
[role=listbox] { display: grid; grid-template-columns: repeat(4, 8em);
                 gap: .5em; }
[role=listbox] button { padding: 1em .5em; }
aside { width: 18em; border-left: 1px solid #ccc; padding-left: 1em; }
aside section { margin-bottom: 1em; }
aside h3 { margin: 0; font-size: .8em; color: #777; }
"""

# Renders the detail panel after `delay` ms; broken icons render no sections
_SCRIPT = """\
const ICONS = %(icons)s;
const DELAY = %(delay)d;
function showIcon(name) {
  const panel = document.getElementById("detail");
  panel.innerHTML = "";
  setTimeout(() => {
    const icon = ICONS[name];
    if (icon.broken) {
      panel.innerHTML = "<p>Details unavailable</p>";
      return;
    }
    panel.innerHTML =
      '<section class="detail-section"><h3>Icon name</h3>' +
      '<span class="value">' + icon.name + "</span></section>" +
      '<section class="detail-section"><h3>Category</h3>' +
      '<span class="value">' + icon.category + "</span></section>" +
      '<section class="detail-section"><h3>Code point</h3>' +
      "<code>" + icon.code_point + "</code></section>" +
      '<div class="ready" data-icon="' + icon.name + '"></div>';
  }, DELAY);
}
document.querySelectorAll("[data-icon]").forEach((button) => {
  button.addEventListener("click", () => showIcon(button.dataset.icon));
});
"""


def _icon_button(icon: DemoIcon) -> str:
    name = html.escape(icon.name)
    return (
        f'<button role="option" aria-haspopup="dialog" '
        f'aria-label="{name}" data-icon="{name}">{name}</button>'
    )


def catalog_page_html(
    icons: list[DemoIcon] | None = None, delay_ms: int = 150
) -> str:
    """Build the catalog page.

    Args:
        icons: Icons to list (default: ICONS).
        delay_ms: Panel render delay after a click.

    Returns:
        Complete HTML document.
    """
    icons = ICONS if icons is None else icons
    buttons = "\n    ".join(_icon_button(icon) for icon in icons)
    script = _SCRIPT % {
        "icons": json.dumps({icon.name: asdict(icon) for icon in icons}),
        "delay": delay_ms,
    }
    return f"""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Demo Icon Catalog</title>
  <style>{_CSS}</style>
</head>
<body>
  <div role="listbox" aria-label="Icons">
    {buttons}
    <button role="option" aria-label="load more">Load more</button>
  </div>
  <aside id="detail" aria-live="polite"></aside>
  <script>{script}</script>
</body>
</html>
"""
