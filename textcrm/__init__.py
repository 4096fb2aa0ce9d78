"""
TextCRM Package
===============

A mention-driven personal CRM core.

Free-text notes contain ``@name`` mentions. The package parses them,
classifies each one as a person or a place, and keeps People and Places
registries that are always re-derivable from the message log.

Main Components:
    - nlp: Mention extraction and classification
    - pipeline: Reconciliation, suggestions and the message log service
    - database: SQLAlchemy-backed message store
    - sources: Contact book and live place search collaborators
    - core: Logging, validation, paths, configuration, user session
    - dataclasses: Message, Mention, Person, Place value types
    - cli: Command-line interface (``crm``)
"""

__version__ = "0.3.0"
