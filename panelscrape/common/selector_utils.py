"""Selector utility functions.

Helpers shared by the extractor and the Playwright driver: deciding whether a
selector string is XPath or CSS, and whether it targets elements (and can
therefore serve as a readiness signal).
"""

import re

# A leading function call such as string(...) or normalize-space(...)
_FUNCTION_CALL = re.compile(r"^[A-Za-z][\w-]*\s*\(")


def selector_type(selector: str) -> str:
    """Classify a selector string as "xpath" or "css".

    XPath selectors start with "/", "." or "(" (a parenthesized expression),
    or with a function call such as string(...); anything else is treated as
    CSS.

    Examples:
        >>> selector_type("//section[@class='detail']")
        'xpath'
        >>> selector_type(".//code")
        'xpath'
        >>> selector_type("normalize-space(.//code)")
        'xpath'
        >>> selector_type("section.detail code")
        'css'
    """
    stripped = selector.strip()
    if _FUNCTION_CALL.match(stripped):
        return "xpath"
    if stripped.startswith(("/", ".", "(")):
        # ".class" CSS selectors also start with "."
        if (
            stripped.startswith(".")
            and stripped != "."
            and not stripped.startswith(("./", ".."))
        ):
            return "css"
        return "xpath"
    return "css"


def targets_elements(selector: str) -> bool:
    """Determine if a selector targets elements rather than strings.

    Only element-targeting selectors can act as a readiness signal ("an
    element matching this selector exists in the panel"). XPath expressions
    that return text nodes or attributes, scalar function calls such as
    string(...), and expressions using EXSLT functions are read as strings
    instead.

    Args:
        selector: The selector string.

    Returns:
        True if the selector targets elements, False otherwise.

    Examples:
        >>> targets_elements("//div[@class='panel']")
        True
        >>> targets_elements("//div/@href")
        False
        >>> targets_elements("//div/text()")
        False
        >>> targets_elements("div.panel")
        True
    """
    if selector_type(selector) == "css":
        return True

    selector = selector.strip()

    # Function calls (string(), normalize-space(), count()) yield scalars
    if _FUNCTION_CALL.match(selector):
        return False

    if selector.endswith("/text()"):
        return False

    if "/@" in selector:
        parts = selector.split("/")
        if parts and parts[-1].startswith("@"):
            return False

    exslt_prefixes = [
        "re:",
        "str:",
        "math:",
        "set:",
        "dyn:",
        "exsl:",
        "func:",
        "date:",
    ]

    return all(prefix not in selector for prefix in exslt_prefixes)
