"""
Basic ytfetch usage example.

Demonstrates converting a local VTT subtitle file to plain text.
"""

import sys

from ytfetch import convert_vtt_file, vtt_to_text

def main():
    # Convert a VTT string directly
    text = vtt_to_text(
        "WEBVTT\n"
        "\n"
        "00:00:01.000 --> 00:00:03.000\n"
        "<00:00:01.000><c>Hello</c> <00:00:01.500><c>world</c>\n"
    )
    print(f"Converted text: {text}")

    if len(sys.argv) < 2:
        print("\nPass a .vtt file to convert it to a .txt next to it")
        return

    # Convert a VTT file, dropping the rolling repeats of auto-generated tracks
    print(f"\nConverting {sys.argv[1]}...")
    txt_path = convert_vtt_file(sys.argv[1], deduplicate=True)
    print(f"Text saved to: {txt_path}")

if __name__ == "__main__":
    main()
