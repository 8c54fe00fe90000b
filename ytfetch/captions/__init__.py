"""
Caption conversion package.

Turns downloaded WebVTT subtitle tracks into continuous plain text.
"""

from .converter import (
    clean_cue_text,
    vtt_to_text,
    convert_vtt_file,
    text_path_for,
)

__all__ = [
    "clean_cue_text",
    "vtt_to_text",
    "convert_vtt_file",
    "text_path_for",
]
