# File: presat_library/config_io/xml_values.py
# Extraction of the values stored in a simple XML file such as presat.xml.
# Only the text content of the elements matters: tag names are free, values
# are read positionally in document order.

import xml.etree.ElementTree as ET


def read_config_values(filename):
    """
    Reads an XML document and returns the text values of its elements.

    Elements are visited in document order. Text made only of whitespace
    (indentation between nested elements) is skipped; other values are
    returned with surrounding whitespace stripped.

    Args:
        filename (str or path-like): Path to the XML file.

    Returns:
        list of str: The values, in document order.

    Raises:
        OSError: If the file cannot be opened.
        xml.etree.ElementTree.ParseError: If the document is not well-formed XML.
    """
    root = ET.parse(filename).getroot()
    values = []
    for element in root.iter():
        # Direct text of the element only, child elements contribute their own values
        text = (element.text or "") + "".join(child.tail or "" for child in element)
        text = text.strip()
        if text:
            values.append(text)
    return values


class ValueCursor:
    """
    Sequential reader over a list of configuration values.

    Each instance owns its position; reading advances it by one value.
    """
    def __init__(self, values):
        self._values = list(values)
        self._position = 0

    @property
    def position(self):
        return self._position

    @property
    def remaining(self):
        return len(self._values) - self._position

    def next_value(self, name="value"):
        """Returns the next value as a string."""
        if self._position >= len(self._values):
            raise ValueError(f"Missing {name}: configuration holds only {len(self._values)} value(s).")
        value = self._values[self._position]
        self._position += 1
        return value

    def next_int(self, name="value"):
        """Returns the next value as an int."""
        text = self.next_value(name)
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"Cannot read {name} as an integer: {text!r}") from None

    def next_float(self, name="value"):
        """Returns the next value as a float."""
        text = self.next_value(name)
        try:
            return float(text)
        except ValueError:
            raise ValueError(f"Cannot read {name} as a number: {text!r}") from None
