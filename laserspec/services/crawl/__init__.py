"""Equipment spec crawling subsystem.

Structure:
- catalog.py: brand tables, static targets, listing and sitemap sources
- policy.py: host and URL admission filters
- discovery.py: seed files, sitemaps and listing pages -> Targets
- fetcher.py: httpx client with timeout and bounded retry
- parsers/: generic heuristics, brand adapters, spec tables, PDFs
- quality.py: draft -> record and the quality gate
- pipeline.py: ordered dedup + bounded worker pool
- exporter.py / importer_adapter.py: JSON/CSV files or the import endpoint
- runner.py: CLI entrypoint

Uses httpx + selectolax for pages and pypdf for spec sheets.
"""
