"""
Tagger - Tag files, then find them with filter expressions.

Packages:
- src.core: configuration, logging, signals, service lifecycle, MongoDB
- src.tagger: tag model, filter engine, storage backends, service, CLI
"""
