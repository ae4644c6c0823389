"""
Custom exceptions for the MISMO LDD rules engine.

Validators report bad XML and bad field values as structured results, so the
exceptions below are reserved for configuration faults and for conditions the
HTTP boundary must translate into a status code.
"""


class LDDRulesError(Exception):
    """Base exception for all LDD rules engine errors."""
    pass


class XMLParsingError(LDDRulesError):
    """Exception raised when XML content cannot be parsed into a tree."""

    def __init__(self, message: str, xml_content: str = None):
        """
        Initialize XML parsing error.

        Args:
            message: Error description
            xml_content: Optional XML content that failed to parse (truncated for logging)
        """
        super().__init__(message)
        # Keep only the first 500 chars for debugging
        self.xml_content = xml_content[:500] + "..." if xml_content and len(xml_content) > 500 else xml_content


class ConfigurationError(LDDRulesError):
    """Exception raised when the LDD contract is invalid or missing."""
    pass


class MappingContractError(ConfigurationError):
    """Exception raised when contract tables reference each other inconsistently (e.g. an unknown enum type)."""
    pass


class UnknownActionError(LDDRulesError):
    """Exception raised when a request names an action the dispatcher does not know."""

    def __init__(self, action: str = None):
        super().__init__("Invalid action")
        self.action = action


class UnknownSchemaPackError(LDDRulesError):
    """Exception raised when a request names a schema pack that is not pinned."""

    def __init__(self, pack_id: str = None):
        super().__init__(f"Unknown pack_id: {pack_id}")
        self.pack_id = pack_id
