"""
Script analysis response parsing

The narrative-analysis model answers in prose with the structured analysis
embedded in a ```json fenced block. This module splits the two.
"""

import json
import logging
import re
from typing import Optional, Tuple

from .models import ScriptAnalysis

logger = logging.getLogger(__name__)

JSON_BLOCK = re.compile(r"```json\s*([\s\S]*?)\s*```")


def parse_director_response(response: str) -> Tuple[str, Optional[ScriptAnalysis]]:
    """
    Extract the script analysis from a model response.

    Args:
        response: Full response text

    Returns:
        (conversational_text, analysis). When no fenced block is present or
        it does not parse, the full text is returned with analysis None.
    """
    text = response or ""
    match = JSON_BLOCK.search(text)
    if not match:
        return text, None

    try:
        analysis = ScriptAnalysis.from_dict(json.loads(match.group(1)))
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("Could not parse analysis block: %s", e)
        return text, None

    conversational = (text[:match.start()] + text[match.end():]).strip()
    logger.info("Parsed analysis with %d scenes and %d beats",
                len(analysis.scenes), analysis.beat_count)
    return conversational, analysis
