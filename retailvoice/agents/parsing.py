"""
Tabular Response Parser.

Converts a Google Visualization ("gviz") response into uniform records.
The payload is not pure JSON: the table object is wrapped in a JavaScript
callback, so the JSON object is cut out between the first "{" and the last "}".
"""

import json
import logging
from typing import Any, Dict, List

from retailvoice.errors import ParseError

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the embedded JSON object from a gviz payload.
    
    Args:
        text: Raw response text
    
    Returns:
        Decoded JSON object
    
    Raises:
        ParseError: If no JSON object can be extracted
    """
    if not text:
        raise ParseError("Empty payload")
    
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise ParseError("No JSON object found in payload")
    
    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON in payload: {e}") from e
    
    if not isinstance(data, dict):
        raise ParseError("Payload JSON is not an object")
    return data


def _get_table(data: Dict[str, Any]) -> Dict[str, Any]:
    table = data.get("table")
    if not isinstance(table, dict) or "rows" not in table or "cols" not in table:
        raise ParseError("Invalid gviz response structure (missing table, rows or cols)")
    if not isinstance(table["rows"], list) or not isinstance(table["cols"], list):
        raise ParseError("Invalid gviz response structure (rows and cols must be lists)")
    return table


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    return str(value).strip() == ""


def parse_table(text: str) -> List[Dict[str, Any]]:
    """
    Parse a gviz payload into one record per non-empty row.
    
    Columns without a label are dropped. Missing cells default to None.
    Values are copied verbatim; coercion belongs to the mapper.
    
    Args:
        text: Raw response text
    
    Returns:
        List of {column label: raw value} dicts, in row order
    
    Raises:
        ParseError: If the payload or its table structure is malformed
    """
    table = _get_table(extract_json_object(text))
    
    headers = [
        col.get("label") if isinstance(col, dict) else None
        for col in table["cols"]
    ]
    
    records = []
    dropped = 0
    for row in table["rows"]:
        cells = row.get("c") if isinstance(row, dict) else None
        if not isinstance(cells, list):
            dropped += 1
            continue
        
        record = {}
        is_empty = True
        for i, label in enumerate(headers):
            if not label:
                continue
            cell = cells[i] if i < len(cells) else None
            value = cell.get("v") if isinstance(cell, dict) else None
            if not _is_blank(value):
                is_empty = False
            record[label] = value
        
        if is_empty:
            dropped += 1
            continue
        records.append(record)
    
    if dropped:
        logger.debug(f"Dropped {dropped} empty rows")
    return records


def extract_cell_value(text: str) -> Any:
    """
    Return the value of the first cell of the first row.
    
    Used to read single-cell ranges such as the reviews version marker.
    
    Raises:
        ParseError: If the payload holds no such cell
    """
    data = extract_json_object(text)
    try:
        return data["table"]["rows"][0]["c"][0]["v"]
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError(f"No cell value in payload: {e!r}") from e
