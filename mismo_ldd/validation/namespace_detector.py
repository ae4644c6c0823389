"""
Namespace declaration and vendor extension detection over raw XML text.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List


NAMESPACE_PATTERN = re.compile(r'xmlns(?::([a-zA-Z]+))?="([^"]+)"')
EXTENSION_BLOCK_PATTERN = re.compile(r'<OTHER[^>]*xmlns:([A-Za-z]+)="([^"]+)"')


@dataclass(frozen=True)
class NamespaceDeclaration:
    """An xmlns declaration; prefix is 'default' for an unprefixed declaration."""
    prefix: str
    uri: str

    def to_dict(self) -> Dict[str, str]:
        return {"prefix": self.prefix, "uri": self.uri}


@dataclass
class ExtensionReport:
    """
    Vendor extension summary.

    count is the number of <OTHER xmlns:prefix="..."> blocks, or 1 when a bare
    <EXTENSION> tag is present but no such block was found, else 0.
    """
    has_extensions: bool
    count: int
    namespaces: List[NamespaceDeclaration] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasExtensions": self.has_extensions,
            "count": self.count,
            "namespaces": [ns.to_dict() for ns in self.namespaces],
        }


def detect_namespaces(xml_content: str) -> List[NamespaceDeclaration]:
    """Every xmlns / xmlns:prefix declaration, in document order."""
    return [
        NamespaceDeclaration(prefix=match.group(1) or 'default', uri=match.group(2))
        for match in NAMESPACE_PATTERN.finditer(xml_content)
    ]


def detect_extensions(xml_content: str) -> ExtensionReport:
    """Detect <EXTENSION> usage and vendor-namespaced <OTHER> blocks."""
    has_extensions = '<EXTENSION>' in xml_content
    namespaces = [
        NamespaceDeclaration(prefix=match.group(1), uri=match.group(2))
        for match in EXTENSION_BLOCK_PATTERN.finditer(xml_content)
    ]
    count = len(namespaces) or (1 if has_extensions else 0)
    return ExtensionReport(has_extensions=has_extensions, count=count, namespaces=namespaces)
