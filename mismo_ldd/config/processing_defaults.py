"""
Centralized operational defaults for LDD validation and mapping.

These are service settings rather than LDD content: the enumerations, patterns and
field mappings themselves live in the LDD contract. Environment variables read by
ConfigManager override the pack and log level at startup.
"""


class ValidationDefaults:
    """
    Centralized operational configuration for validation and mapping.

    Values are read by the validators and the rules engine; change them once here.
    """

    # Enum findings
    ALLOWED_VALUES_PREVIEW = 5  # Allowed values echoed in INVALID_LDD_ENUM messages

    # Datatype formatting
    STRING_MAX_LENGTH = 255  # Truncation length for String fields
    CREDIT_SCORE_MIN = 300
    CREDIT_SCORE_MAX = 850
    PERCENT_MAX = 100
    RATE_PERCENT_MAX = 50
    NUMERIC_MAX_DIGITS = 28  # Integer digits accepted for Integer/Count/CreditScore (Decimal context precision)

    # Content hashing
    HASH_ALGORITHM = "SHA-256"

    # Logging
    LOG_LEVEL = "INFO"  # Default logging level (CRITICAL, ERROR, WARNING, INFO, DEBUG)

    @classmethod
    def to_dict(cls) -> dict:
        """
        Export all defaults as a dictionary.

        Returns:
            Dictionary of all ValidationDefaults class attributes.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if not key.startswith('_') and key.isupper()
        }

    @classmethod
    def log_summary(cls, logger=None):
        """
        Log a summary of all operational defaults.

        Args:
            logger: Optional logger instance. If None, prints to stdout.
        """
        config_dict = cls.to_dict()
        summary = "\n".join([f"  {key}: {value}" for key, value in sorted(config_dict.items())])
        message = f"Validation Configuration Defaults:\n{summary}"

        if logger:
            logger.info(message)
        else:
            print(message)
