"""Crawl and Scrape - Single-Page Extraktor für Workflow-Hosts"""

__version__ = "0.1.0"
