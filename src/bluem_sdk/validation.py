"""XSD validation of request documents."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Union

from lxml import etree

from .contexts import TransactionContext
from .models.errors import SchemaNotFoundError

logger = logging.getLogger(__name__)

XmlInput = Union[bytes, str, etree._Element]


@lru_cache(maxsize=None)
def load_schema(path: Path) -> etree.XMLSchema:
    """Compile an XSD file once; compiled schemas are shared read-only."""
    if not path.is_file():
        raise SchemaNotFoundError(str(path))
    parser = etree.XMLParser(no_network=True, resolve_entities=False)
    return etree.XMLSchema(etree.parse(str(path), parser))


def format_diagnostic(entry: etree._LogEntry) -> str:
    return f"Error {entry.type} in {entry.filename} (line {entry.line}): {entry.message}"


class XmlSchemaValidator:
    """Validate documents against the schema of a context.

    ``validate`` never raises for bad documents: malformed XML and schema
    violations are both collected in ``error_details``. Only a missing schema
    file raises, as ``SchemaNotFoundError``.
    """

    def __init__(self):
        self.error_details: list[str] = []

    def validate(self, context: TransactionContext, xml: XmlInput) -> bool:
        self.error_details = []
        schema = load_schema(context.schema_path)

        if isinstance(xml, etree._Element):
            document = xml
        else:
            if isinstance(xml, str):
                xml = xml.encode("utf-8")
            parser = etree.XMLParser(no_network=True, resolve_entities=False)
            try:
                document = etree.fromstring(xml, parser)
            except etree.XMLSyntaxError as e:
                self.error_details = [format_diagnostic(entry) for entry in e.error_log] or [str(e)]
                logger.debug(
                    "Request document is not well-formed",
                    extra={"data": {"errors": self.error_details}},
                )
                return False

        try:
            schema.assertValid(document)
        except etree.DocumentInvalid as e:
            self.error_details = [format_diagnostic(entry) for entry in e.error_log]
            logger.debug(
                "Request document violates %s",
                context.schema_path.name,
                extra={"data": {"errors": self.error_details}},
            )
            return False
        return True

    def error_summary(self) -> str:
        return "; ".join(self.error_details)
