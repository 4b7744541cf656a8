"""Sequential, interface-driven data extraction.

This package activates the actionable elements of a page one at a time, waits
for the transient panel each activation produces, and extracts named fields
from a static snapshot of that panel. The core procedure lives in
panelscrape.extractor; the browser side lives in panelscrape.driver.
"""
