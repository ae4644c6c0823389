"""
Tag-balance well-formedness checker for raw MISMO XML text.

This is a lightweight structural scan, not an XML parser: it confirms every
opening tag has a matching, properly nested closing tag and that the text holds
no characters XML 1.0 forbids. Processing instructions, comments and
declarations are skipped.

Tags are matched one line at a time, so an opening tag whose attributes wrap
onto a following line (e.g. a MESSAGE root with one xmlns per line) is not
seen, and its closing tag is then reported as unexpected. Put each start tag
on a single line before checking such documents.
"""

import logging
import re
from typing import List, Tuple

from ..utils import StringUtils
from ..validation.validation_models import WellFormedResult


logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(r'<\/?([a-zA-Z_:][a-zA-Z0-9_:.-]*)[^>]*\/?>')
INVALID_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F]')


def check_well_formed(xml_content: str) -> WellFormedResult:
    """
    Check that raw XML text is well-formed at the tag level.

    Args:
        xml_content: Raw XML text of any size

    Returns:
        WellFormedResult; a valid result carries no error, line or column.
        Unexpected failures are reported as invalid at line 1, column 1.
    """
    try:
        stripped = xml_content.strip()
        if not stripped.startswith('<?xml') and not stripped.startswith('<'):
            return WellFormedResult(valid=False, error='Content does not appear to be XML', line=1, column=1)

        # (tag name, line, column) of each open tag
        tag_stack: List[Tuple[str, int, int]] = []

        for line_index, line in enumerate(xml_content.split('\n')):
            for match in TAG_PATTERN.finditer(line):
                full_tag = match.group(0)
                tag_name = match.group(1)

                if full_tag.startswith('</'):
                    if not tag_stack or tag_stack[-1][0] != tag_name:
                        logger.debug(f"Unexpected closing tag </{tag_name}> at line {line_index + 1}")
                        return WellFormedResult(
                            valid=False,
                            error=f'Unexpected closing tag </{tag_name}>',
                            line=line_index + 1,
                            column=match.start() + 1,
                        )
                    tag_stack.pop()
                elif not full_tag.endswith('/>') and not full_tag.startswith('<?') and not full_tag.startswith('<!'):
                    tag_stack.append((tag_name, line_index + 1, match.start() + 1))

        if tag_stack:
            tag_name, line, column = tag_stack[-1]
            return WellFormedResult(valid=False, error=f'Unclosed tag: <{tag_name}>', line=line, column=column)

        invalid_char = INVALID_CHAR_PATTERN.search(xml_content)
        if invalid_char:
            position = invalid_char.start()
            return WellFormedResult(
                valid=False,
                error='Invalid XML character found',
                line=StringUtils.line_number_at(xml_content, position),
                column=position - xml_content.rfind('\n', 0, position),
            )

        return WellFormedResult(valid=True)

    except Exception as e:
        logger.warning(f"Well-formedness check failed unexpectedly: {e}")
        return WellFormedResult(valid=False, error=str(e), line=1, column=1)
