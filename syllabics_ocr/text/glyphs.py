"""
Glyph tables for Cree syllabics.

Fixed mappings between base syllabics and their reduced (final) and
dotted forms. These are closed sets and must not be modified at
runtime.
"""

from types import MappingProxyType

# =============================================================================
# CONSTANTS
# =============================================================================

# Emitted for boxes whose geometry says "dot", and the form a lone dot
# takes in the corrected output
DOT = "ᐤ"

# Intermediate marker for a dot that may still attach to a neighbour
ATTACHABLE_DOT = "ᐧ"

# Two dots side by side
DOUBLE_DOT_FINAL = "ᐝ"

# Two identical strokes from ASPIRATE_PARTS read as the aspirate final
ASPIRATE = "ᐦ"
ASPIRATE_PARTS = frozenset({"ᑊ", "ᐠ", "ᐟ"})

# Syllabic -> final drawn when the box is noticeably smaller than its
# neighbours
FINALS = MappingProxyType(
    {
        "ᑕ": "ᒼ",
        "ᑐ": "ᐣ",
        "ᑎ": "ᐢ",
        "ᐸ": "ᑉ",
        "ᑲ": "ᒃ",
        "ᒐ": "ᒡ",
        "ᒪ": "ᒻ",
        "ᓇ": "ᓐ",
        "ᓴ": "ᔅ",
        "ᔕ": "ᔥ",
        "ᔭ": "ᔾ",
        "ᕋ": "ᕐ",
        "ᓚ": "ᓪ",
        "ᕙ": "ᕝ",
        "ᕦ": "ᕪ",
    }
)

# Syllabic -> form with a dot attached after it
DOT_RIGHT = MappingProxyType(
    {
        "ᐁ": "ᐍ",
        "ᐃ": "ᐏ",
        "ᐅ": "ᐓ",
        "ᐊ": "ᐘ",
        "ᐄ": "ᐑ",
        "ᐆ": "ᐕ",
        "ᐋ": "ᐚ",
    }
)

# Syllabic -> form with a dot attached before it
DOT_LEFT = MappingProxyType(
    {
        "ᐁ": "ᐌ",
        "ᐃ": "ᐎ",
        "ᐅ": "ᐒ",
        "ᐊ": "ᐗ",
        "ᐄ": "ᐐ",
        "ᐆ": "ᐔ",
        "ᐋ": "ᐙ",
    }
)
